"""Category model: one node of the ordered, owner-scoped category tree."""

import uuid

from sqlalchemy import Column, Index, String, Text, Float, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from ..database import Base


def generate_category_id() -> str:
    return f"cat-{uuid.uuid4().hex[:12]}"


class Category(Base):
    """A category node.

    ``user_id`` is ``None`` for shared nodes. ``sort_order`` is a fractional
    order key, only meaningful among siblings visible to one requester.
    ``path`` is derived from the ancestor names and can always be rebuilt.
    """

    __tablename__ = "categories"
    __table_args__ = (
        Index("ix_categories_user_id", "user_id"),
        Index("ix_categories_parent_id", "parent_id"),
        Index("ix_categories_parent_sort", "parent_id", "sort_order"),
    )

    id = Column(String(50), primary_key=True, default=generate_category_id)
    user_id = Column(String(50), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(String(50), ForeignKey("categories.id", ondelete="CASCADE"), nullable=True)
    sort_order = Column(Float, nullable=False, default=0.0)
    path = Column(String(2000), nullable=False, default="")
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Category {self.id} {self.name!r} parent={self.parent_id} key={self.sort_order}>"
