"""SQLAlchemy node store for the categories table."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query

from .base import BaseRepository
from .node_store import NodeStore
from ..exceptions import CategoryTreeError, ForbiddenError, NotFoundError, StoreFailureError
from ..models.category import Category, generate_category_id

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[Category], NodeStore):
    """Point reads/writes, visibility-filtered range reads, and the atomic
    cascade delete. Every write commits on its own."""

    model_class = Category
    not_found_error = NotFoundError

    # --- Reads ---

    def find_by_id(self, node_id: str) -> Optional[Category]:
        return self.get_by_id_optional(node_id)

    def list_siblings(
        self, parent_id: Optional[str], user_id: Optional[str], exclude_id: Optional[str] = None
    ) -> List[Category]:
        query = self._visible(self._under(self.db.query(Category), parent_id), user_id)
        if exclude_id:
            query = query.filter(Category.id != exclude_id)
        with self._store_errors("list siblings"):
            return self._ordered(query).all()

    def list_children(self, parent_id: str) -> List[Category]:
        query = self.db.query(Category).filter(Category.parent_id == parent_id)
        with self._store_errors("list children"):
            return self._ordered(query).all()

    def list_visible(self, user_id: Optional[str]) -> List[Category]:
        query = self._visible(self.db.query(Category), user_id)
        with self._store_errors("list categories"):
            return self._ordered(query).all()

    def count(self) -> int:
        with self._store_errors("count categories"):
            return self.db.query(Category).count()

    # --- Writes ---

    def insert(
        self,
        owner_id: Optional[str],
        name: str,
        description: Optional[str],
        parent_id: Optional[str],
        order_key: float,
        path: str = "",
        extra: Optional[Dict[str, Any]] = None,
    ) -> Category:
        category = Category(
            id=generate_category_id(),
            user_id=owner_id,
            name=name,
            description=description,
            parent_id=parent_id,
            sort_order=order_key,
            path=path,
            extra=extra,
        )
        with self._store_errors("create category"):
            self.db.add(category)
            self.db.commit()
            self.db.refresh(category)
        return category

    def update_order_and_parent(
        self, node_id: str, order_key: float, parent_id: Optional[str]
    ) -> Category:
        category = self.get_by_id(node_id)
        with self._store_errors(f"update order of {node_id}"):
            category.sort_order = order_key
            category.parent_id = parent_id
            self.db.commit()
            self.db.refresh(category)
        return category

    def update_path(self, node_id: str, path: str) -> None:
        category = self.get_by_id(node_id)
        if category.path == path:
            return
        with self._store_errors(f"update path of {node_id}"):
            category.path = path
            self.db.commit()

    def update_name_description(
        self, node_id: str, name: str, description: Optional[str]
    ) -> Category:
        category = self.get_by_id(node_id)
        with self._store_errors(f"update {node_id}"):
            category.name = name
            category.description = description
            self.db.commit()
            self.db.refresh(category)
        return category

    def cascade_delete(self, root_id: str, owner_id: str) -> int:
        """Delete ``root_id`` and its whole subtree in one transaction.

        Ownership is verified inside the same transaction. Levels are deleted
        deepest first; any failure rolls back every level.
        """
        try:
            root = self.db.query(Category).filter(Category.id == root_id).first()
            if root is None:
                raise NotFoundError(root_id)
            if root.user_id is None or root.user_id != owner_id:
                raise ForbiddenError("Only the owner can delete this category", category_id=root_id)

            levels = self._collect_levels(root_id)
            deleted = 0
            for level in reversed(levels):
                result = self.db.execute(
                    delete(Category)
                    .where(Category.id.in_(level))
                    .execution_options(synchronize_session=False)
                )
                deleted += result.rowcount
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Cascade delete rolled back", extra={"category_id": root_id})
            raise StoreFailureError(f"Failed to delete category {root_id}", original_error=e) from e
        except CategoryTreeError:
            self.db.rollback()
            raise

        self.db.expire_all()
        return deleted

    # --- Helpers ---

    def _collect_levels(self, root_id: str) -> List[List[str]]:
        """Subtree ids grouped by depth, root level first."""
        seen = {root_id}
        levels = [[root_id]]
        while True:
            rows = (
                self.db.query(Category.id)
                .filter(Category.parent_id.in_(levels[-1]))
                .all()
            )
            next_level = [row.id for row in rows if row.id not in seen]
            if not next_level:
                return levels
            seen.update(next_level)
            levels.append(next_level)

    @staticmethod
    def _under(query: Query, parent_id: Optional[str]) -> Query:
        if parent_id is None:
            return query.filter(Category.parent_id.is_(None))
        return query.filter(Category.parent_id == parent_id)

    @staticmethod
    def _visible(query: Query, user_id: Optional[str]) -> Query:
        if user_id is None:
            return query.filter(Category.user_id.is_(None))
        return query.filter(or_(Category.user_id == user_id, Category.user_id.is_(None)))

    @staticmethod
    def _ordered(query: Query) -> Query:
        return query.order_by(Category.sort_order, Category.created_at, Category.id)
