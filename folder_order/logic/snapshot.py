"""Sibling snapshots and the store/refresh seams consumed by the ordering core.

A ``Snapshot`` is an immutable, ascending view of ``{id, position}`` pairs for
one collection at one instant. ``SnapshotReader`` obtains a fresh one from a
``PositionStore`` on every call; nothing here caches across a cleanup cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional, Protocol, Union
import logging

from folder_order.logic.errors import NotFound, SnapshotCorrupted

logger = logging.getLogger(__name__)

# Collection id of the top-level folder list; folder ids name source collections.
FOLDER_LIST = "folders"


class Side(str, Enum):
    AFTER = "after"
    BEFORE = "before"


class Edge(Enum):
    """Anchor sentinels for "at the start" / "at the end" of a collection."""

    START = "start"
    END = "end"


Anchor = Union[str, Edge]


@dataclass(frozen=True)
class SiblingPosition:
    id: str
    position: int


@dataclass(frozen=True)
class Snapshot:
    collection_id: str
    siblings: tuple[SiblingPosition, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        previous: Optional[int] = None
        for sibling in self.siblings:
            if sibling.position < 0:
                raise SnapshotCorrupted(
                    f"negative position {sibling.position} for {sibling.id} in {self.collection_id}"
                )
            if previous is not None and sibling.position <= previous:
                raise SnapshotCorrupted(
                    f"positions not strictly increasing at {sibling.id} in {self.collection_id}"
                )
            if sibling.id in seen:
                raise SnapshotCorrupted(f"duplicate item {sibling.id} in {self.collection_id}")
            seen.add(sibling.id)
            previous = sibling.position

    @classmethod
    def from_rows(cls, collection_id: str, rows: Iterable[tuple[str, int]]) -> "Snapshot":
        """Build a snapshot from ``(id, position)`` rows already in display order."""
        return cls(
            collection_id=collection_id,
            siblings=tuple(SiblingPosition(str(item_id), int(pos)) for item_id, pos in rows),
        )

    def __len__(self) -> int:
        return len(self.siblings)

    def __iter__(self) -> Iterator[SiblingPosition]:
        return iter(self.siblings)

    @property
    def positions(self) -> list[int]:
        return [s.position for s in self.siblings]

    def index_of(self, item_id: str) -> int:
        for idx, sibling in enumerate(self.siblings):
            if sibling.id == item_id:
                return idx
        raise NotFound("anchor", item_id)

    def without(self, item_id: str) -> "Snapshot":
        return Snapshot(
            collection_id=self.collection_id,
            siblings=tuple(s for s in self.siblings if s.id != item_id),
        )


class PositionStore(Protocol):
    """Backend that owns positions: read, renumber, and persist moves."""

    async def read_snapshot(self, collection_id: str) -> Snapshot: ...

    async def renumber(self, collection_id: str) -> None: ...

    async def persist_move(
        self,
        item_id: str,
        collection_id: str,
        position: int,
        *,
        from_collection_id: Optional[str] = None,
    ) -> None: ...

    async def persist_copy(self, item_id: str, collection_id: str, position: int) -> None: ...


class ListRefresher(Protocol):
    """Presentation-layer hook asked to re-render a collection after a write."""

    def reload_list(self, collection_id: str) -> None: ...


class SnapshotReader:
    """Reads the current sibling order of a collection from a store."""

    def __init__(self, store: PositionStore) -> None:
        self.store = store

    async def read(self, collection_id: str, *, exclude: Optional[str] = None) -> Snapshot:
        snapshot = await self.store.read_snapshot(collection_id)
        if exclude is not None:
            snapshot = snapshot.without(exclude)
        logger.debug("snapshot.read collection=%s size=%s exclude=%s", collection_id, len(snapshot), exclude)
        return snapshot


__all__ = [
    "FOLDER_LIST",
    "Side",
    "Edge",
    "Anchor",
    "SiblingPosition",
    "Snapshot",
    "PositionStore",
    "ListRefresher",
    "SnapshotReader",
]
