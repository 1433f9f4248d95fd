"""Explicit position cleanup endpoints.

Clients call these after a ``SNAPSHOT_CORRUPTED`` problem, or on demand, to
re-space a collection at multiples of the configured step.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from folder_order.http.hx import reload_response
from folder_order.logic.events import POSITIONS_RENUMBERED, EventListRefresher, publish
from folder_order.logic.repository_folders import SqlPositionStore
from folder_order.logic.snapshot import FOLDER_LIST
from folder_order.models.moves import CleanupResult
from folder_order.routes.deps import get_refresher, get_store


router = APIRouter(prefix="/cleanup-position")
logger = logging.getLogger(__name__)


async def _cleanup(collection_id: str, store: SqlPositionStore, refresher: EventListRefresher):
    await store.renumber(collection_id)
    snapshot = await store.read_snapshot(collection_id)
    publish(POSITIONS_RENUMBERED, {"collection_id": collection_id, "count": len(snapshot)})
    refresher.reload_list(collection_id)
    body = CleanupResult(collection_id=collection_id, renumbered=len(snapshot))
    return reload_response(body.model_dump(), refresher)


@router.post("/folders", summary="Renumber the folder list")
async def post_cleanup_folders(
    store: SqlPositionStore = Depends(get_store),
    refresher: EventListRefresher = Depends(get_refresher),
):
    return await _cleanup(FOLDER_LIST, store, refresher)


@router.post("/folders/{folder_id}/sources", summary="Renumber the sources of one folder")
async def post_cleanup_folder_sources(
    folder_id: str,
    store: SqlPositionStore = Depends(get_store),
    refresher: EventListRefresher = Depends(get_refresher),
):
    return await _cleanup(folder_id, store, refresher)


__all__ = ["router"]
