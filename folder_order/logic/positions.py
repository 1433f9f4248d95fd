"""Sparse position allocation.

Pure arithmetic over a ``Snapshot``: given an anchor sibling and a side, pick
an integer strictly between the two neighbours, or report that no integer is
left (``EXHAUSTED``). Appends past the last sibling always succeed by adding
``STEP``. Nothing here performs I/O or awaits; the cleanup-and-retry protocol
lives in ``folder_order.logic.cleanup``.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Union

from folder_order.logic.errors import NotFound
from folder_order.logic.snapshot import Anchor, Edge, Side, Snapshot

STEP = 1000


class Exhausted(Enum):
    EXHAUSTED = "exhausted"

    def __repr__(self) -> str:
        return "EXHAUSTED"


EXHAUSTED = Exhausted.EXHAUSTED

Allocation = Union[int, Exhausted]


def _after(positions: Sequence[int], idx: int, step: int) -> Allocation:
    if idx == len(positions) - 1:
        return positions[idx] + step
    low, high = positions[idx], positions[idx + 1]
    if high - low > 1:
        return (low + high) // 2
    return EXHAUSTED


def _before(positions: Sequence[int], idx: int) -> Allocation:
    if idx == 0:
        if positions[0] > 1:
            return positions[0] // 2
        return EXHAUSTED
    low, high = positions[idx - 1], positions[idx]
    if high - low > 1:
        return (low + high) // 2
    return EXHAUSTED


def allocate(snapshot: Snapshot, anchor: Anchor, side: Side | str, step: int = STEP) -> Allocation:
    """Return a new position adjacent to ``anchor`` on ``side``, or ``EXHAUSTED``.

    ``anchor`` is a sibling id, or ``Edge.START`` / ``Edge.END`` to insert at
    the head or tail of the collection (``side`` is ignored for sentinels).
    An empty collection always yields ``step``. Raises ``NotFound`` when the
    anchor id is not part of the snapshot.
    """
    side = Side(side)
    positions = snapshot.positions
    if not positions:
        if isinstance(anchor, Edge):
            return step
        raise NotFound("anchor", str(anchor))
    if anchor is Edge.END:
        return _after(positions, len(positions) - 1, step)
    if anchor is Edge.START:
        return _before(positions, 0)
    idx = snapshot.index_of(anchor)
    if side is Side.AFTER:
        return _after(positions, idx, step)
    return _before(positions, idx)


def next_position(snapshot: Snapshot, step: int = STEP) -> int:
    """Position for appending past the last sibling (``step`` when empty)."""
    positions = snapshot.positions
    if not positions:
        return step
    return positions[-1] + step


__all__ = ["STEP", "EXHAUSTED", "Exhausted", "Allocation", "allocate", "next_position"]
