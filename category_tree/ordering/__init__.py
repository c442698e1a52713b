"""Ordering and placement engine: key allocation, move resolution, path upkeep."""

from .allocator import allocate, append_key, INITIAL_KEY, BOUNDARY_GAP, MIN_SPACING
from .placement import Placement, resolve_placement
from .paths import compute_path, join_path, update_paths

__all__ = [
    "allocate",
    "append_key",
    "INITIAL_KEY",
    "BOUNDARY_GAP",
    "MIN_SPACING",
    "Placement",
    "resolve_placement",
    "compute_path",
    "join_path",
    "update_paths",
]
