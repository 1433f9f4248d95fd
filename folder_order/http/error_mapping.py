"""Central error mapping for ordering failures.

Single source of truth for mapping domain exceptions to problem+json titles,
codes and HTTP statuses. Route modules raise domain errors and never hardcode
these values. Lookup walks the exception's MRO so subclasses inherit their
parent's mapping unless listed explicitly.
"""

from __future__ import annotations

from folder_order.logic.errors import (
    MembershipConflict,
    NotFound,
    OrderingError,
    PositionSpaceExhausted,
    SnapshotCorrupted,
    StoreFailure,
)

ORDERING_ERROR_MAP: dict[type, dict] = {
    NotFound: {"title": "Not Found", "status": 404},
    MembershipConflict: {"title": "Conflict", "status": 409},
    SnapshotCorrupted: {"title": "Conflict", "status": 409},
    PositionSpaceExhausted: {"title": "Internal Server Error", "status": 500},
    StoreFailure: {"title": "Service Unavailable", "status": 503},
    OrderingError: {"title": "Internal Server Error", "status": 500},
}


def lookup(exc: OrderingError) -> dict:
    """Return ``{"title", "status", "code"}`` for a domain exception."""
    for klass in type(exc).__mro__:
        mapped = ORDERING_ERROR_MAP.get(klass)
        if mapped is not None:
            return {**mapped, "code": exc.code}
    return {"title": "Internal Server Error", "status": 500, "code": exc.code}


__all__ = ["ORDERING_ERROR_MAP", "lookup"]
