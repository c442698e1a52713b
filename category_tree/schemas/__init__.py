"""Pydantic schemas for API validation."""

from .category import (
    MovePosition,
    CategoryCreate,
    CategoryUpdate,
    CategoryMove,
    CategoryResponse,
    CategoryTreeNode,
    DeleteResult,
    DescendantCount,
    FlatCategory,
)

__all__ = [
    "MovePosition",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryMove",
    "CategoryResponse",
    "CategoryTreeNode",
    "DeleteResult",
    "DescendantCount",
    "FlatCategory",
]
