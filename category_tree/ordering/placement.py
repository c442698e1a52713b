"""Placement resolution for drag-and-drop moves.

Turns (moving node, reference node, position) into the new parent and the
insertion index among that parent's visible siblings. All legality checks
happen here, before anything is written.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from ..exceptions import ForbiddenError, InvalidMoveError
from ..schemas.category import MovePosition

# parent_id -> visible siblings under that parent, ascending by sort_order
SiblingLookup = Callable[[Optional[str]], Sequence]
# (ancestor_id, candidate_id) -> True if candidate lies under ancestor
DescendantCheck = Callable[[str, str], bool]


@dataclass(frozen=True)
class Placement:
    """Resolved target of a move."""
    parent_id: Optional[str]
    insert_index: int
    sibling_keys: Tuple[float, ...] = ()


def resolve_placement(
    moving,
    reference,
    position: MovePosition,
    requester_id: Optional[str],
    visible_siblings_of: SiblingLookup,
    is_descendant: DescendantCheck,
) -> Placement:
    """Resolve where ``moving`` lands.

    Args:
        moving: The node being dragged.
        reference: The node it was dropped on/next to, or ``None`` for root level.
        position: before / after / inside the reference.
        requester_id: Owner id of the caller (``None`` = anonymous).
        visible_siblings_of: Merged private + shared siblings for a parent id.
        is_descendant: Ancestry test used for cycle rejection.

    Raises:
        ForbiddenError: ``moving`` is shared or owned by someone else.
        InvalidMoveError: The move would create a cycle, or the reference is
            not among the siblings of its own parent.
    """
    position = MovePosition(position)

    if moving.user_id is None:
        raise ForbiddenError("Shared categories cannot be moved", category_id=moving.id)
    if requester_id is None or moving.user_id != requester_id:
        raise ForbiddenError(category_id=moving.id)

    if reference is None:
        parent_id = None
    elif reference.id == moving.id:
        raise InvalidMoveError("Cannot move a category relative to itself", moving.id, reference.id)
    elif position is MovePosition.INSIDE:
        parent_id = reference.id
    else:
        parent_id = reference.parent_id

    if parent_id is not None and (parent_id == moving.id or is_descendant(moving.id, parent_id)):
        raise InvalidMoveError(
            "Cannot move a category into itself or one of its descendants",
            moving.id,
            reference.id if reference is not None else None,
        )

    siblings = [s for s in visible_siblings_of(parent_id) if s.id != moving.id]
    keys = tuple(s.sort_order for s in siblings)

    if reference is None or position is MovePosition.INSIDE:
        return Placement(parent_id=parent_id, insert_index=len(siblings), sibling_keys=keys)

    index = _index_of(siblings, reference.id)
    if index is None:
        raise InvalidMoveError(
            "Reference category is not among the visible siblings", moving.id, reference.id
        )
    if position is MovePosition.AFTER:
        index += 1
    return Placement(parent_id=parent_id, insert_index=index, sibling_keys=keys)


def _index_of(siblings: List, node_id: str) -> Optional[int]:
    for i, sibling in enumerate(siblings):
        if sibling.id == node_id:
            return i
    return None
