"""Schemas for the category tree API."""

from enum import Enum
from datetime import datetime
from typing import Optional, List, Dict, Any

from pydantic import BaseModel, Field, field_validator


class MovePosition(str, Enum):
    """Where a dragged node lands relative to the reference node."""
    BEFORE = "before"
    AFTER = "after"
    INSIDE = "inside"


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Category name cannot be empty")
    if '/' in v:
        raise ValueError("Category name cannot contain '/'")
    return v


# --- Category schemas ---

class CategoryCreate(BaseModel):
    """Create a private category for the authenticated user."""
    name: str = Field(..., max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class CategoryUpdate(BaseModel):
    """Rename a category or change its description."""
    name: str = Field(..., max_length=255)
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class CategoryMove(BaseModel):
    """Drop a category before/after/inside a reference node (None = root level)."""
    reference_id: Optional[str] = None
    position: MovePosition = MovePosition.INSIDE


class CategoryResponse(BaseModel):
    """Category in API responses."""
    id: str
    user_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    sort_order: float
    path: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="extra")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True


class DeleteResult(BaseModel):
    """Outcome of a cascade delete."""
    deleted_id: str
    descendant_count: int


class DescendantCount(BaseModel):
    category_id: str
    count: int


# --- Tree schema ---

class CategoryTreeNode(CategoryResponse):
    """A category with its visible children, ordered by sort_order."""
    children: List['CategoryTreeNode'] = []

    @classmethod
    def from_category(cls, category) -> "CategoryTreeNode":
        return cls(
            id=category.id,
            user_id=category.user_id,
            name=category.name,
            description=category.description,
            parent_id=category.parent_id,
            sort_order=category.sort_order,
            path=category.path,
            extra=category.extra,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )


class FlatCategory(CategoryResponse):
    """Flattened node held by the in-memory projection.

    ``children`` holds child ids, ``sort_order`` is an integer position.
    """
    children: List[str] = []
