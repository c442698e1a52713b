"""Data access repositories."""

from .base import BaseRepository
from .node_store import NodeStore
from .category_repository import CategoryRepository

__all__ = [
    "BaseRepository",
    "NodeStore",
    "CategoryRepository",
]
