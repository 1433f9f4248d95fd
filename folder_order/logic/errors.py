"""Ordering error taxonomy.

Allocation-internal exhaustion is a returned sentinel (see
``folder_order.logic.positions.EXHAUSTED``) and never appears here. Every
class below escapes to the caller as-is; the HTTP layer maps them to
problem+json responses via ``folder_order.http.error_mapping``.
"""

from __future__ import annotations


class OrderingError(Exception):
    """Base class for errors raised by the ordering core and its stores."""

    code = "ORDERING_ERROR"


class NotFound(OrderingError):
    """A referenced collection, item or anchor does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"{kind} not found: {ident}")
        self.kind = kind
        self.ident = ident


class PositionSpaceExhausted(OrderingError):
    """No gap remained between neighbours even after a cleanup pass."""

    code = "POSITION_SPACE_EXHAUSTED"

    def __init__(self, collection_id: str, anchor: object, side: str) -> None:
        super().__init__(
            f"position space still exhausted after cleanup collection={collection_id} anchor={anchor} side={side}"
        )
        self.collection_id = collection_id
        self.anchor = anchor
        self.side = side


class SnapshotCorrupted(OrderingError):
    """Stored positions break the strictly-increasing, non-negative invariant."""

    code = "SNAPSHOT_CORRUPTED"


class StoreFailure(OrderingError):
    """I/O failure while reading, renumbering or persisting."""

    code = "STORE_FAILURE"


class MembershipConflict(StoreFailure):
    """Write rejected because it would duplicate a membership or position."""

    code = "MEMBERSHIP_CONFLICT"


__all__ = [
    "OrderingError",
    "NotFound",
    "PositionSpaceExhausted",
    "SnapshotCorrupted",
    "StoreFailure",
    "MembershipConflict",
]
