"""Materialized path maintenance.

A node's path is its parent's path joined with the parent's name, so a move
or rename invalidates the paths of the whole subtree below it. Traversal uses
an explicit stack so tree depth is bounded only by memory.
"""

import logging
from typing import Optional

from ..exceptions import CategoryTreeError, NotFoundError, PathMaintenanceError

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"


def join_path(parent_path: Optional[str], parent_name: str) -> str:
    """Path of any child of a node with the given path and name."""
    if parent_path:
        return f"{parent_path}{PATH_SEPARATOR}{parent_name}"
    return parent_name


def compute_path(parent) -> str:
    """Path of a node whose parent is ``parent`` (``None`` for root level)."""
    if parent is None:
        return ""
    return join_path(parent.path, parent.name)


def update_paths(store, node_id: str, new_parent_id: Optional[str]) -> int:
    """Rewrite the path of ``node_id`` and every descendant.

    Idempotent. Children are looked up regardless of owner so shared nodes
    under a moved subtree stay consistent. A child deleted between the
    listing and its write is skipped along with its subtree.

    Returns:
        Number of rows whose path was written.

    Raises:
        PathMaintenanceError: a store read/write failed, or ``node_id`` or its
            new parent no longer exists. Rows already written stay written.
    """
    try:
        node = store.find_by_id(node_id)
        if node is None:
            raise PathMaintenanceError(node_id, "category no longer exists")

        parent = store.find_by_id(new_parent_id) if new_parent_id else None
        if new_parent_id and parent is None:
            raise PathMaintenanceError(node_id, f"parent {new_parent_id} no longer exists")

        node_path = compute_path(parent)
        store.update_path(node.id, node_path)
        written = 1

        stack = [(node.id, node_path, node.name)]
        while stack:
            current_id, current_path, current_name = stack.pop()
            child_path = join_path(current_path, current_name)
            for child in store.list_children(current_id):
                try:
                    store.update_path(child.id, child_path)
                except NotFoundError:
                    logger.debug("Skipping deleted category", extra={"category_id": child.id})
                    continue
                written += 1
                stack.append((child.id, child_path, child.name))
    except PathMaintenanceError:
        raise
    except CategoryTreeError as e:
        raise PathMaintenanceError(node_id, e.message) from e

    logger.debug("Paths updated", extra={"category_id": node_id, "rows": written})
    return written
