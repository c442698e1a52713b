"""Business logic services."""

from .category_service import CategoryService
from .tree_projection import TreeSession

__all__ = ["CategoryService", "TreeSession"]
