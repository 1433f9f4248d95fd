"""Functional tests for sparse position allocation.

Covers the midpoint/edge arithmetic, exhaustion detection, anchor sentinels,
snapshot validation, and a randomised monotonicity sweep. Everything here is
pure: no store, network, or event loop.
"""

from __future__ import annotations

import random

import pytest

from folder_order.logic.errors import NotFound, SnapshotCorrupted
from folder_order.logic.positions import EXHAUSTED, STEP, allocate, next_position
from folder_order.logic.snapshot import Edge, Side, SiblingPosition, Snapshot


def snap(*pairs: tuple[str, int]) -> Snapshot:
    return Snapshot.from_rows("folder-1", pairs)


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------


def test_insert_after_first_of_two_takes_midpoint() -> None:
    assert allocate(snap(("A", 1000), ("B", 2000)), "A", Side.AFTER) == 1500


def test_append_to_empty_collection_uses_step() -> None:
    assert allocate(snap(), Edge.END, Side.AFTER) == STEP
    assert allocate(snap(), Edge.START, Side.BEFORE) == STEP


def test_insert_before_single_item_halves_position() -> None:
    assert allocate(snap(("A", 1000)), "A", Side.BEFORE) == 500


def test_insert_before_position_one_is_exhausted() -> None:
    assert allocate(snap(("A", 1)), "A", Side.BEFORE) is EXHAUSTED


def test_insert_before_position_zero_is_exhausted() -> None:
    assert allocate(snap(("A", 0), ("B", 1000)), "A", "before") is EXHAUSTED


def test_insert_after_last_adds_step_without_upper_bound() -> None:
    assert allocate(snap(("A", 1000), ("B", 2000)), "B", Side.AFTER) == 3000
    assert allocate(snap(("A", 10**15)), "A", Side.AFTER) == 10**15 + STEP


def test_custom_step_is_honoured() -> None:
    assert allocate(snap(("A", 40)), "A", Side.AFTER, step=64) == 104
    assert allocate(snap(), Edge.END, Side.AFTER, step=64) == 64


def test_insert_before_middle_item_takes_lower_midpoint() -> None:
    assert allocate(snap(("A", 1000), ("B", 1003), ("C", 5000)), "B", Side.BEFORE) == 1001


def test_odd_gap_floors_midpoint() -> None:
    assert allocate(snap(("A", 1), ("B", 4)), "A", Side.AFTER) == 2


# ---------------------------------------------------------------------------
# Exhaustion
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "anchor,side",
    [("A", Side.AFTER), ("B", Side.BEFORE)],
)
def test_adjacent_positions_report_exhausted_not_collision(anchor: str, side: Side) -> None:
    assert allocate(snap(("A", 1000), ("B", 1001)), anchor, side) is EXHAUSTED


def test_gap_of_two_still_allocates() -> None:
    assert allocate(snap(("A", 1000), ("B", 1002)), "A", Side.AFTER) == 1001


def test_exhausted_is_returned_not_raised() -> None:
    result = allocate(snap(("A", 7), ("B", 8)), "A", Side.AFTER)
    assert result is EXHAUSTED
    assert repr(result) == "EXHAUSTED"


# ---------------------------------------------------------------------------
# Anchor handling
# ---------------------------------------------------------------------------


def test_end_sentinel_appends_regardless_of_side() -> None:
    s = snap(("A", 1000), ("B", 2000))
    assert allocate(s, Edge.END, Side.AFTER) == 3000
    assert allocate(s, Edge.END, Side.BEFORE) == 3000


def test_start_sentinel_prepends_regardless_of_side() -> None:
    s = snap(("A", 1000), ("B", 2000))
    assert allocate(s, Edge.START, Side.BEFORE) == 500
    assert allocate(s, Edge.START, Side.AFTER) == 500


def test_unknown_anchor_raises_not_found() -> None:
    with pytest.raises(NotFound) as info:
        allocate(snap(("A", 1000)), "Z", Side.AFTER)
    assert info.value.kind == "anchor"
    assert info.value.ident == "Z"


def test_anchor_in_empty_collection_raises_not_found() -> None:
    with pytest.raises(NotFound):
        allocate(snap(), "A", Side.BEFORE)


def test_invalid_side_is_rejected() -> None:
    with pytest.raises(ValueError):
        allocate(snap(("A", 1000)), "A", "sideways")


# ---------------------------------------------------------------------------
# next_position and snapshot invariants
# ---------------------------------------------------------------------------


def test_next_position_follows_last_item() -> None:
    assert next_position(snap()) == STEP
    assert next_position(snap(("A", 1000), ("B", 1750))) == 2750


def test_snapshot_rejects_duplicate_positions() -> None:
    with pytest.raises(SnapshotCorrupted):
        snap(("A", 1000), ("B", 1000))


def test_snapshot_rejects_descending_positions() -> None:
    with pytest.raises(SnapshotCorrupted):
        snap(("A", 2000), ("B", 1000))


def test_snapshot_rejects_negative_positions() -> None:
    with pytest.raises(SnapshotCorrupted):
        snap(("A", -1))


def test_snapshot_rejects_duplicate_ids() -> None:
    with pytest.raises(SnapshotCorrupted):
        Snapshot("f", (SiblingPosition("A", 1), SiblingPosition("A", 2)))


def test_snapshot_without_drops_only_named_item() -> None:
    s = snap(("A", 1000), ("B", 2000), ("C", 3000))
    assert [x.id for x in s.without("B")] == ["A", "C"]
    assert len(s) == 3


# ---------------------------------------------------------------------------
# Monotonicity sweep
# ---------------------------------------------------------------------------


def _random_snapshot(rng: random.Random) -> Snapshot:
    count = rng.randint(1, 12)
    positions: list[int] = []
    current = rng.randint(0, 3)
    for _ in range(count):
        positions.append(current)
        current += rng.choice([1, 1, 2, 3, 17, 500, 1000])
    return snap(*[(f"item-{i}", p) for i, p in enumerate(positions)])


def test_allocations_fall_strictly_between_neighbours() -> None:
    rng = random.Random(20240611)
    for _ in range(300):
        s = _random_snapshot(rng)
        p = s.positions
        for idx, sibling in enumerate(s):
            after = allocate(s, sibling.id, Side.AFTER)
            if idx == len(p) - 1:
                assert after == p[idx] + STEP
            elif p[idx + 1] - p[idx] > 1:
                assert p[idx] < after < p[idx + 1]
            else:
                assert after is EXHAUSTED

            before = allocate(s, sibling.id, Side.BEFORE)
            low = p[idx - 1] if idx > 0 else 0
            if p[idx] - low > 1 or (idx == 0 and p[0] > 1):
                assert before is not EXHAUSTED
                assert before not in p
                assert before < p[idx]
                if idx > 0:
                    assert before > p[idx - 1]
            else:
                assert before is EXHAUSTED
