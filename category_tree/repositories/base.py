"""Base repository with shared get-by-ID patterns.

Subclasses specify model_class, id_column and not_found_error; the base
provides lookups that raise or return None. Any SQLAlchemy failure is
rolled back and re-raised as StoreFailureError.
"""

from contextlib import contextmanager
from typing import TypeVar, Generic, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import CategoryTreeError, StoreFailureError

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Category)
        id_column:       Name of the primary-key column (default "id")
        not_found_error: Exception class to raise from get_by_id
    """

    model_class: Type[ModelT]
    id_column: str = "id"
    not_found_error: Type[CategoryTreeError]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id(self, entity_id: str) -> ModelT:
        """Get entity by primary key. Raises not_found_error if missing."""
        entity = self.get_by_id_optional(entity_id)
        if not entity:
            raise self.not_found_error(entity_id)
        return entity

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        with self._store_errors(f"load {entity_id}"):
            return self._base_query().filter(col == entity_id).first()

    @contextmanager
    def _store_errors(self, action: str):
        """Roll back and translate database errors for one store call."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreFailureError(f"Failed to {action}", original_error=e) from e
