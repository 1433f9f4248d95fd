"""Ordering core and persistence helpers."""

from folder_order.logic.cleanup import CleanupCoordinator
from folder_order.logic.errors import (
    MembershipConflict,
    NotFound,
    OrderingError,
    PositionSpaceExhausted,
    SnapshotCorrupted,
    StoreFailure,
)
from folder_order.logic.move_executor import MoveExecutor
from folder_order.logic.positions import EXHAUSTED, STEP, allocate, next_position
from folder_order.logic.snapshot import FOLDER_LIST, Edge, Side, SiblingPosition, Snapshot, SnapshotReader

__all__ = [
    "CleanupCoordinator",
    "MoveExecutor",
    "SnapshotReader",
    "Snapshot",
    "SiblingPosition",
    "Side",
    "Edge",
    "FOLDER_LIST",
    "STEP",
    "EXHAUSTED",
    "allocate",
    "next_position",
    "OrderingError",
    "NotFound",
    "PositionSpaceExhausted",
    "SnapshotCorrupted",
    "StoreFailure",
    "MembershipConflict",
]
