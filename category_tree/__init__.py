"""Ordered, owner-scoped category tree with drag-and-drop placement."""

__version__ = "1.0.0"
