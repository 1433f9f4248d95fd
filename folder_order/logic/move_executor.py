"""Entry point used by UI move actions.

Resolves a position in the destination collection, persists it, then asks the
refresher to reload the affected lists. The persist call is the only mutating
step, so abandoning a move before it leaves nothing changed. Store failures
propagate unchanged; the caller decides whether to retry the user action.
"""

from __future__ import annotations

from typing import Optional
import logging

from folder_order.logic.cleanup import CleanupCoordinator
from folder_order.logic.positions import STEP
from folder_order.logic.snapshot import Anchor, ListRefresher, PositionStore, Side

logger = logging.getLogger(__name__)


class MoveExecutor:
    def __init__(
        self,
        store: PositionStore,
        refresher: Optional[ListRefresher] = None,
        *,
        step: int = STEP,
        coordinator: Optional[CleanupCoordinator] = None,
    ) -> None:
        self.store = store
        self.refresher = refresher
        self.coordinator = coordinator or CleanupCoordinator(store, step=step)

    async def move_item(self, item_id: str, collection_id: str, anchor: Anchor, side: Side | str) -> int:
        """Move ``item_id`` next to ``anchor`` inside ``collection_id``; return its new position."""
        position = await self.coordinator.resolve(collection_id, anchor, side, exclude=item_id)
        await self.store.persist_move(item_id, collection_id, position)
        logger.info("move_item item=%s collection=%s position=%s", item_id, collection_id, position)
        self._reload(collection_id)
        return position

    async def move_to_collection(
        self,
        item_id: str,
        from_collection_id: str,
        to_collection_id: str,
        anchor: Anchor,
        side: Side | str,
    ) -> int:
        """Move ``item_id`` out of one collection and next to ``anchor`` in another."""
        if from_collection_id == to_collection_id:
            return await self.move_item(item_id, to_collection_id, anchor, side)
        position = await self.coordinator.resolve(to_collection_id, anchor, side, exclude=item_id)
        await self.store.persist_move(
            item_id,
            to_collection_id,
            position,
            from_collection_id=from_collection_id,
        )
        logger.info(
            "move_to_collection item=%s from=%s to=%s position=%s",
            item_id,
            from_collection_id,
            to_collection_id,
            position,
        )
        self._reload(from_collection_id)
        self._reload(to_collection_id)
        return position

    async def copy_to_collection(self, item_id: str, to_collection_id: str, anchor: Anchor, side: Side | str) -> int:
        """Add ``item_id`` to another collection without leaving its current one."""
        position = await self.coordinator.resolve(to_collection_id, anchor, side, exclude=item_id)
        await self.store.persist_copy(item_id, to_collection_id, position)
        logger.info("copy_to_collection item=%s to=%s position=%s", item_id, to_collection_id, position)
        self._reload(to_collection_id)
        return position

    def _reload(self, collection_id: str) -> None:
        if self.refresher is None:
            return
        try:
            self.refresher.reload_list(collection_id)
        except Exception:
            # Fire-and-forget: the move is already persisted
            logger.warning("reload_list failed collection=%s", collection_id, exc_info=True)


__all__ = ["MoveExecutor"]
