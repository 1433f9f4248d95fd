"""Exhaustion recovery around the gap allocator.

``CleanupCoordinator.resolve`` reads a snapshot and allocates. When the
allocator reports ``EXHAUSTED`` it asks the store to renumber the collection,
re-reads only after the renumber completes, and allocates again. The number of
cleanup passes is bounded by ``retry_budget`` (one); a second exhaustion means
the store did not actually re-space the siblings and is raised as
``PositionSpaceExhausted`` instead of retried.
"""

from __future__ import annotations

from typing import Optional
import logging

from folder_order.logic.errors import PositionSpaceExhausted
from folder_order.logic.positions import EXHAUSTED, STEP, allocate
from folder_order.logic.snapshot import Anchor, PositionStore, Side, SnapshotReader

logger = logging.getLogger(__name__)


class CleanupCoordinator:
    retry_budget = 1

    def __init__(self, store: PositionStore, *, step: int = STEP, reader: Optional[SnapshotReader] = None) -> None:
        self.store = store
        self.step = step
        self.reader = reader or SnapshotReader(store)

    async def resolve(
        self,
        collection_id: str,
        anchor: Anchor,
        side: Side | str,
        *,
        exclude: Optional[str] = None,
    ) -> int:
        side = Side(side)
        cleanups = 0
        while True:
            snapshot = await self.reader.read(collection_id, exclude=exclude)
            result = allocate(snapshot, anchor, side, self.step)
            if result is not EXHAUSTED:
                logger.debug(
                    "positions.resolve collection=%s anchor=%s side=%s position=%s cleanups=%s",
                    collection_id,
                    anchor,
                    side.value,
                    result,
                    cleanups,
                )
                return result
            if cleanups >= self.retry_budget:
                logger.error(
                    "positions.resolve.exhausted_after_cleanup collection=%s anchor=%s side=%s positions=%s",
                    collection_id,
                    anchor,
                    side.value,
                    snapshot.positions,
                )
                raise PositionSpaceExhausted(collection_id, anchor, side.value)
            logger.info(
                "positions.resolve.exhausted collection=%s anchor=%s side=%s; renumbering",
                collection_id,
                anchor,
                side.value,
            )
            await self.store.renumber(collection_id)
            cleanups += 1


__all__ = ["CleanupCoordinator"]
