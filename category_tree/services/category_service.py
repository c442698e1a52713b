"""Category tree operations: move, create, rename, delete, tree building.

The service is the only caller of the ordering engine. It validates a move
fully before the single-row store write, then repairs materialized paths as
a best-effort follow-up.
"""

import logging
from typing import Callable, Dict, List, Optional

from ..exceptions import (
    ForbiddenError,
    NotFoundError,
    PathMaintenanceError,
    ValidationError,
)
from ..ordering.allocator import allocate, append_key
from ..ordering.paths import PATH_SEPARATOR, compute_path, update_paths
from ..ordering.placement import resolve_placement
from ..repositories.node_store import NodeStore
from ..schemas.category import CategoryTreeNode, DeleteResult, MovePosition

logger = logging.getLogger(__name__)


class CategoryService:
    """Business logic for the category tree.

    Public methods:
        get_tree          -- merged private + shared tree for a requester
        create_node       -- append a new private category under a parent
        rename_node       -- change name/description, refresh descendant paths
        move_node         -- drag-and-drop move (before / after / inside)
        delete_node       -- atomic cascade delete of a subtree
        count_descendants -- subtree size for delete confirmation
    """

    def __init__(self, store: NodeStore):
        self.store = store

    def get_tree(self, user_id: Optional[str] = None) -> List[CategoryTreeNode]:
        """Nested tree of every node visible to ``user_id``.

        Nodes whose parent is not visible to the requester are left out,
        along with their subtrees.
        """
        categories = self.store.list_visible(user_id)
        nodes: Dict[str, CategoryTreeNode] = {
            c.id: CategoryTreeNode.from_category(c) for c in categories
        }

        roots: List[CategoryTreeNode] = []
        for category in categories:
            node = nodes[category.id]
            if category.parent_id is None:
                roots.append(node)
            elif category.parent_id in nodes:
                nodes[category.parent_id].children.append(node)
        return roots

    def create_node(
        self,
        name: str,
        description: Optional[str],
        parent_id: Optional[str],
        user_id: str,
        metadata: Optional[dict] = None,
    ):
        """Create a private category appended after its visible siblings."""
        name = _clean_name(name)

        parent = None
        if parent_id:
            parent = self._require_visible(parent_id, user_id)

        siblings = self.store.list_siblings(parent_id, user_id)
        order_key = append_key([s.sort_order for s in siblings])

        category = self.store.insert(
            user_id, name, description, parent_id, order_key,
            path=compute_path(parent), extra=metadata,
        )
        logger.info(
            "Category created",
            extra={"category_id": category.id, "parent_id": parent_id, "sort_order": order_key},
        )
        return category

    def rename_node(self, node_id: str, name: str, description: Optional[str], user_id: str):
        """Update name and description. Descendant paths follow the new name."""
        name = _clean_name(name)

        category = self._require_owned(node_id, user_id)
        renamed = category.name != name

        category = self.store.update_name_description(node_id, name, description)
        if renamed:
            self._repair_paths(node_id, category.parent_id)
        return category

    def move_node(
        self,
        active_id: str,
        reference_id: Optional[str],
        position: MovePosition,
        user_id: Optional[str],
    ):
        """Move ``active_id`` before/after/inside ``reference_id``.

        ``reference_id=None`` moves the node to the end of the root level.
        Only the moved row is written; paths are repaired afterwards.

        Raises:
            NotFoundError: moving or reference node missing / not visible.
            ForbiddenError: the moving node is not owned by ``user_id``.
            InvalidMoveError: cycle, or reference not among expected siblings.
            StoreFailureError: the single-row update failed; nothing applied.
        """
        moving = self.store.find_by_id(active_id)
        if moving is None:
            raise NotFoundError(active_id)
        if moving.user_id is None:
            raise ForbiddenError("Shared categories cannot be moved", category_id=active_id)
        if moving.user_id != user_id:
            raise ForbiddenError(category_id=active_id)

        reference = None
        if reference_id is not None:
            reference = self._require_visible(reference_id, user_id)

        placement = resolve_placement(
            moving,
            reference,
            position,
            user_id,
            visible_siblings_of=lambda parent_id: self.store.list_siblings(
                parent_id, user_id, exclude_id=active_id
            ),
            is_descendant=self._is_descendant,
        )
        order_key = allocate(placement.sibling_keys, placement.insert_index)

        moved = self.store.update_order_and_parent(active_id, order_key, placement.parent_id)
        logger.info(
            "Category moved",
            extra={
                "category_id": active_id,
                "reference_id": reference_id,
                "position": MovePosition(position).value,
                "parent_id": placement.parent_id,
                "sort_order": order_key,
            },
        )

        self._repair_paths(active_id, placement.parent_id)
        return moved

    def delete_node(self, node_id: str, user_id: str) -> DeleteResult:
        """Delete a node and its whole subtree atomically.

        The store performs the authoritative deletion in one transaction; on
        failure nothing is removed and the store error propagates.
        """
        self._require_owned(node_id, user_id)
        descendant_count = self._count_subtree(node_id)

        self.store.cascade_delete(node_id, user_id)
        logger.info(
            "Category deleted",
            extra={"category_id": node_id, "descendant_count": descendant_count},
        )
        return DeleteResult(deleted_id=node_id, descendant_count=descendant_count)

    def count_descendants(self, node_id: str, user_id: Optional[str]) -> int:
        """Number of nodes below ``node_id`` visible to ``user_id``.

        Backs the delete confirmation prompt. Other users' private nodes under
        a shared node are not counted.
        """
        self._require_visible(node_id, user_id)
        return self._count_subtree(node_id, include=lambda c: _visible_to(c, user_id))

    # --- Helpers ---

    def _count_subtree(self, node_id: str, include: Optional[Callable] = None) -> int:
        count = 0
        seen = {node_id}
        stack = [node_id]
        while stack:
            for child in self.store.list_children(stack.pop()):
                if child.id in seen or (include is not None and not include(child)):
                    continue
                seen.add(child.id)
                count += 1
                stack.append(child.id)
        return count

    def _require_visible(self, node_id: str, user_id: Optional[str]):
        category = self.store.find_by_id(node_id)
        if category is None or not _visible_to(category, user_id):
            raise NotFoundError(node_id)
        return category

    def _require_owned(self, node_id: str, user_id: Optional[str]):
        category = self.store.find_by_id(node_id)
        if category is None:
            raise NotFoundError(node_id)
        if category.user_id is None or category.user_id != user_id:
            raise ForbiddenError(category_id=node_id)
        return category

    def _is_descendant(self, ancestor_id: str, candidate_id: str) -> bool:
        """Walk up from ``candidate_id``; True if ``ancestor_id`` is on the chain."""
        seen = set()
        current = self.store.find_by_id(candidate_id)
        while current is not None and current.id not in seen:
            if current.id == ancestor_id:
                return True
            seen.add(current.id)
            if current.parent_id is None:
                return False
            current = self.store.find_by_id(current.parent_id)
        return False

    def _repair_paths(self, node_id: str, parent_id: Optional[str]) -> None:
        try:
            update_paths(self.store, node_id, parent_id)
        except PathMaintenanceError as e:
            logger.warning(
                "Path maintenance failed; paths will be repaired on the next move",
                extra={"category_id": node_id, "reason": e.message},
            )


def _visible_to(category, user_id: Optional[str]) -> bool:
    return category.user_id is None or (user_id is not None and category.user_id == user_id)


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name cannot be empty", field="name")
    if PATH_SEPARATOR in name:
        raise ValidationError(
            f"Category name cannot contain '{PATH_SEPARATOR}'", field="name"
        )
    return name
