"""Fractional order-key allocation for sibling sets.

Pure functions, no store access. A move rewrites only the moved row: the new
key is placed between its future neighbours, or one boundary gap beyond the
first/last sibling.
"""

import math
from typing import Sequence

INITIAL_KEY = 10000.0
BOUNDARY_GAP = 10000.0
# Below this spacing the midpoint is no longer trusted.
MIN_SPACING = 1e-9


def allocate(sibling_keys: Sequence[float], insert_index: int) -> float:
    """Return an order key that lands at ``insert_index`` among ``sibling_keys``.

    Args:
        sibling_keys: Keys of the visible siblings, sorted ascending, without
            the node being placed.
        insert_index: Zero-based landing position. Values outside
            ``[0, len(sibling_keys)]`` are clamped to the nearest end.

    Returns:
        The new key. Strictly between the neighbours when their spacing is at
        least ``MIN_SPACING``. When the neighbours have collapsed closer than
        that, the key is pushed past the left neighbour by extra headroom and
        may land beyond the right one; siblings are never renumbered here.
    """
    count = len(sibling_keys)
    if count == 0:
        return INITIAL_KEY

    if insert_index <= 0:
        return sibling_keys[0] - BOUNDARY_GAP
    if insert_index >= count:
        return sibling_keys[-1] + BOUNDARY_GAP

    prev_key = sibling_keys[insert_index - 1]
    next_key = sibling_keys[insert_index]
    spacing = next_key - prev_key
    midpoint = (prev_key + next_key) / 2

    if spacing >= MIN_SPACING and prev_key < midpoint < next_key:
        return midpoint

    candidate = prev_key + spacing * 0.5 + BOUNDARY_GAP * 0.01
    if candidate == prev_key or candidate == next_key:
        candidate = math.nextafter(max(prev_key, next_key), math.inf)
    return candidate


def append_key(sibling_keys: Sequence[float]) -> float:
    """Key for a node appended after every existing sibling."""
    return allocate(sibling_keys, len(sibling_keys))
