"""In-memory position store (test/dev only).

Holds ``collection_id -> {item_id: position}`` maps and implements the
``PositionStore`` protocol without a database, so the ordering core can be
exercised and demonstrated in isolation.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from folder_order.logic.errors import MembershipConflict, NotFound
from folder_order.logic.positions import STEP
from folder_order.logic.snapshot import Snapshot


class InMemoryPositionStore:
    def __init__(self, collections: Optional[Mapping[str, Mapping[str, int]]] = None, *, step: int = STEP) -> None:
        self.collections: Dict[str, Dict[str, int]] = {
            cid: dict(items) for cid, items in (collections or {}).items()
        }
        self.step = step
        # Observation hooks for tests
        self.renumber_calls: List[str] = []
        self.writes: List[dict] = []

    def _collection(self, collection_id: str) -> Dict[str, int]:
        try:
            return self.collections[collection_id]
        except KeyError:
            raise NotFound("collection", collection_id) from None

    def _ordered(self, collection_id: str) -> list[tuple[str, int]]:
        items = self._collection(collection_id)
        return sorted(items.items(), key=lambda kv: (kv[1], kv[0]))

    def _check_free(self, collection_id: str, item_id: str, position: int) -> None:
        for other, pos in self._collection(collection_id).items():
            if other != item_id and pos == position:
                raise MembershipConflict(f"position {position} already used by {other} in {collection_id}")

    async def read_snapshot(self, collection_id: str) -> Snapshot:
        return Snapshot.from_rows(collection_id, self._ordered(collection_id))

    async def renumber(self, collection_id: str) -> None:
        ordered = self._ordered(collection_id)
        self.collections[collection_id] = {
            item_id: (idx + 1) * self.step for idx, (item_id, _) in enumerate(ordered)
        }
        self.renumber_calls.append(collection_id)

    async def persist_move(
        self,
        item_id: str,
        collection_id: str,
        position: int,
        *,
        from_collection_id: Optional[str] = None,
    ) -> None:
        dest = self._collection(collection_id)
        if from_collection_id is not None and from_collection_id != collection_id:
            origin = self._collection(from_collection_id)
            if item_id not in origin:
                raise NotFound("item", item_id)
            if item_id in dest:
                raise MembershipConflict(f"{item_id} already in {collection_id}")
            self._check_free(collection_id, item_id, position)
            del origin[item_id]
        else:
            if item_id not in dest:
                raise NotFound("item", item_id)
            self._check_free(collection_id, item_id, position)
        dest[item_id] = position
        self.writes.append({"item_id": item_id, "collection_id": collection_id, "position": position})

    async def persist_copy(self, item_id: str, collection_id: str, position: int) -> None:
        dest = self._collection(collection_id)
        if item_id in dest:
            raise MembershipConflict(f"{item_id} already in {collection_id}")
        self._check_free(collection_id, item_id, position)
        dest[item_id] = position
        self.writes.append({"item_id": item_id, "collection_id": collection_id, "position": position})


__all__ = ["InMemoryPositionStore"]
