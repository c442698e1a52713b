"""Client-side mirror of the category tree.

A ``TreeSession`` is created per view session and owned by its caller. It
holds a flat ``id -> FlatCategory`` map for drag-and-drop, applies moves
optimistically on integer positions, and is overwritten by the server's tree
after every real request ("server wins").
"""

import logging
from typing import Callable, Dict, List, Optional, Set

from ..schemas.category import CategoryTreeNode, FlatCategory, MovePosition

logger = logging.getLogger(__name__)

TreeFetcher = Callable[[], List[CategoryTreeNode]]
MoveCommitter = Callable[[str, Optional[str], MovePosition], object]


class TreeSession:
    """Flat, optimistic projection of one requester's visible tree."""

    def __init__(self) -> None:
        self.items: Dict[str, FlatCategory] = {}
        self.expanded_ids: Set[str] = set()
        self.active_id: Optional[str] = None
        self.selected_id: Optional[str] = None

    # --- Loading ---

    def set_items(self, tree: List[CategoryTreeNode]) -> None:
        """Replace local state with a flattened copy of ``tree``.

        ``sort_order`` becomes the position inside the parent's children.
        """
        items: Dict[str, FlatCategory] = {}
        stack = [(None, index, node) for index, node in enumerate(tree)]
        while stack:
            parent_id, index, node = stack.pop()
            data = node.model_dump(exclude={"children", "metadata"})
            data.update(
                parent_id=parent_id,
                sort_order=index,
                children=[child.id for child in node.children],
                metadata=node.metadata,
            )
            items[node.id] = FlatCategory(**data)
            stack.extend((node.id, i, child) for i, child in enumerate(node.children))
        self.items = items

    def reconcile(self, fetch: TreeFetcher) -> None:
        """Discard optimistic state and reload from an authoritative read."""
        self.set_items(fetch())

    def reset(self) -> None:
        self.items = {}
        self.expanded_ids = set()
        self.active_id = None
        self.selected_id = None

    # --- Expansion / selection ---

    def toggle_expand(self, node_id: str) -> None:
        if node_id in self.expanded_ids:
            self.expanded_ids.discard(node_id)
        else:
            self.expanded_ids.add(node_id)

    def expand_all(self) -> None:
        self.expanded_ids = set(self.items)

    def collapse_all(self) -> None:
        self.expanded_ids = set()

    # --- Moves ---

    def move_node(
        self, active_id: str, over_id: Optional[str], position: MovePosition
    ) -> bool:
        """Optimistically move ``active_id``. Returns False when nothing changed.

        Unknown ids, and targets that are the node itself or one of its
        descendants, are no-ops: legality is decided by the server.
        """
        position = MovePosition(position)
        active = self.items.get(active_id)
        if active is None:
            return False
        if over_id is not None:
            if over_id not in self.items:
                return False
            if over_id == active_id or over_id in self.get_descendant_ids(active_id):
                return False

        if over_id is None:
            new_parent_id = None
            target = self._ordered_children(None, exclude=active_id)
            index = len(target)
        elif position is MovePosition.INSIDE:
            new_parent_id = over_id
            target = self._ordered_children(over_id, exclude=active_id)
            index = len(target)
        else:
            new_parent_id = self.items[over_id].parent_id
            target = self._ordered_children(new_parent_id, exclude=active_id)
            index = target.index(over_id)
            if position is MovePosition.AFTER:
                index += 1

        old_parent_id = active.parent_id
        target.insert(index, active_id)
        self.items[active_id] = active.model_copy(update={"parent_id": new_parent_id})

        if old_parent_id != new_parent_id:
            self._renumber(old_parent_id, self._ordered_children(old_parent_id, exclude=active_id))
        self._renumber(new_parent_id, target)
        return True

    def apply_move(
        self,
        active_id: str,
        over_id: Optional[str],
        position: MovePosition,
        commit: MoveCommitter,
        fetch: TreeFetcher,
    ) -> None:
        """Optimistic move, then the real request, then reconciliation.

        Local state is always replaced by ``fetch()`` afterwards, whether the
        server accepted the move or not. A server error is re-raised after
        the reload.
        """
        self.move_node(active_id, over_id, position)
        try:
            commit(active_id, over_id, MovePosition(position))
        except Exception:
            logger.info("Move rejected by server; reloading tree", extra={"category_id": active_id})
            raise
        finally:
            self.reconcile(fetch)

    # --- Views ---

    def get_tree(self) -> List[CategoryTreeNode]:
        """Nested tree rebuilt from the flat map, children by ``sort_order``."""
        nodes: Dict[str, CategoryTreeNode] = {}
        for node_id, flat in self.items.items():
            data = flat.model_dump(exclude={"children", "metadata"})
            nodes[node_id] = CategoryTreeNode(**data, extra=flat.metadata)

        roots: List[CategoryTreeNode] = []
        for flat in sorted(self.items.values(), key=lambda f: f.sort_order):
            node = nodes[flat.id]
            if flat.parent_id is None:
                roots.append(node)
            elif flat.parent_id in nodes:
                nodes[flat.parent_id].children.append(node)
        return roots

    def get_descendant_ids(self, node_id: str) -> List[str]:
        descendants: List[str] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            for child_id in self._ordered_children(current):
                descendants.append(child_id)
                stack.append(child_id)
        return descendants

    # --- Helpers ---

    def _ordered_children(self, parent_id: Optional[str], exclude: Optional[str] = None) -> List[str]:
        children = [
            f for f in self.items.values() if f.parent_id == parent_id and f.id != exclude
        ]
        children.sort(key=lambda f: f.sort_order)
        return [f.id for f in children]

    def _renumber(self, parent_id: Optional[str], ordered_ids: List[str]) -> None:
        for position, child_id in enumerate(ordered_ids):
            self.items[child_id] = self.items[child_id].model_copy(update={"sort_order": position})
        if parent_id is not None and parent_id in self.items:
            self.items[parent_id] = self.items[parent_id].model_copy(
                update={"children": list(ordered_ids)}
            )
