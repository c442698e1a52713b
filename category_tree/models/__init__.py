"""Database models."""

from .category import Category, generate_category_id

__all__ = ["Category", "generate_category_id"]
