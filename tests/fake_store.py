"""In-memory NodeStore used by the service and ordering tests."""

from typing import Any, Dict, List, Optional, Set

from category_tree.exceptions import ForbiddenError, NotFoundError, StoreFailureError
from category_tree.models.category import Category
from category_tree.ordering.paths import compute_path
from category_tree.repositories.node_store import NodeStore


class InMemoryNodeStore(NodeStore):
    """Dict-backed store with failure switches.

    fail_order_updates -- update_order_and_parent raises StoreFailureError
    fail_path_updates  -- update_path raises StoreFailureError
    fail_delete_after  -- cascade_delete crashes after removing this many rows
                          and restores the snapshot it took beforehand
    vanish_on_list     -- ids removed right after list_children returns them,
                          as if deleted by a concurrent request
    """

    def __init__(self):
        self.rows: Dict[str, Category] = {}
        self.writes: List[tuple] = []
        self.fail_order_updates = False
        self.fail_path_updates = False
        self.fail_delete_after: Optional[int] = None
        self.vanish_on_list: Set[str] = set()
        self._seq = 0

    # --- Test helpers ---

    def add(self, name: str, owner: Optional[str] = "alice", parent: Optional[str] = None,
            key: Optional[float] = None, node_id: Optional[str] = None) -> Category:
        """Insert a row directly, bypassing the service."""
        self._seq += 1
        parent_row = self.rows[parent] if parent else None
        if key is None:
            key = float(self._seq * 10000)
        row = Category(
            id=node_id or f"n{self._seq}",
            user_id=owner,
            name=name,
            description=None,
            parent_id=parent,
            sort_order=key,
            path=compute_path(parent_row),
        )
        self.rows[row.id] = row
        return row

    def order_of(self, parent_id: Optional[str], user_id: Optional[str]) -> List[str]:
        return [row.name for row in self.list_siblings(parent_id, user_id)]

    # --- NodeStore ---

    def find_by_id(self, node_id: str) -> Optional[Category]:
        return self.rows.get(node_id)

    def list_siblings(self, parent_id, user_id, exclude_id=None) -> List[Category]:
        rows = [
            r for r in self.rows.values()
            if r.parent_id == parent_id and r.id != exclude_id and _visible(r, user_id)
        ]
        return sorted(rows, key=lambda r: (r.sort_order, r.id))

    def list_children(self, parent_id: str) -> List[Category]:
        rows = [r for r in self.rows.values() if r.parent_id == parent_id]
        for row in rows:
            if row.id in self.vanish_on_list:
                del self.rows[row.id]
        return sorted(rows, key=lambda r: (r.sort_order, r.id))

    def list_visible(self, user_id) -> List[Category]:
        rows = [r for r in self.rows.values() if _visible(r, user_id)]
        return sorted(rows, key=lambda r: (r.sort_order, r.id))

    def update_order_and_parent(self, node_id, order_key, parent_id) -> Category:
        if self.fail_order_updates:
            raise StoreFailureError(f"Failed to update order of {node_id}")
        row = self._get(node_id)
        row.sort_order = order_key
        row.parent_id = parent_id
        self.writes.append(("order", node_id))
        return row

    def update_path(self, node_id: str, path: str) -> None:
        if self.fail_path_updates:
            raise StoreFailureError(f"Failed to update path of {node_id}")
        self._get(node_id).path = path
        self.writes.append(("path", node_id))

    def cascade_delete(self, root_id: str, owner_id: str) -> int:
        root = self._get(root_id)
        if root.user_id is None or root.user_id != owner_id:
            raise ForbiddenError(category_id=root_id)

        snapshot = dict(self.rows)
        doomed = [root_id]
        for node_id in doomed:
            doomed.extend(r.id for r in self.rows.values() if r.parent_id == node_id)

        for removed, node_id in enumerate(reversed(doomed)):
            if self.fail_delete_after is not None and removed == self.fail_delete_after:
                self.rows = snapshot
                raise StoreFailureError(f"Failed to delete category {root_id}")
            del self.rows[node_id]
        self.writes.append(("delete", root_id))
        return len(doomed)

    def insert(self, owner_id, name, description, parent_id, order_key,
               path: str = "", extra: Optional[Dict[str, Any]] = None) -> Category:
        self._seq += 1
        row = Category(
            id=f"n{self._seq}",
            user_id=owner_id,
            name=name,
            description=description,
            parent_id=parent_id,
            sort_order=order_key,
            path=path,
            extra=extra,
        )
        self.rows[row.id] = row
        self.writes.append(("insert", row.id))
        return row

    def update_name_description(self, node_id, name, description) -> Category:
        row = self._get(node_id)
        row.name = name
        row.description = description
        self.writes.append(("rename", node_id))
        return row

    def _get(self, node_id: str) -> Category:
        row = self.rows.get(node_id)
        if row is None:
            raise NotFoundError(node_id)
        return row


def _visible(row: Category, user_id: Optional[str]) -> bool:
    return row.user_id is None or (user_id is not None and row.user_id == user_id)
