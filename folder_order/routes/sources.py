"""Source subscription and cross-folder endpoints.

Implements:
- POST /sources                                    subscribe a source into a folder
- POST /sources/{source_id}/move-to-folder         move a source to another folder
- POST /sources/{source_id}/copy-to-folder         add a source to another folder too
- POST /sources/{source_id}/delete-from-folder     drop one folder membership
- POST /sources/{source_id}/unsubscribe            delete the source entirely
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from folder_order.config import AppConfig
from folder_order.http.hx import reload_response
from folder_order.logic.events import SOURCE_REMOVED, SOURCE_SUBSCRIBED, EventListRefresher, publish
from folder_order.logic.move_executor import MoveExecutor
from folder_order.logic.positions import next_position
from folder_order.logic.repository_folders import (
    create_source,
    delete_source,
    delete_source_from_folder,
    get_default_folder_id,
    read_snapshot,
)
from folder_order.logic.snapshot import FOLDER_LIST
from folder_order.models.folders import CreatedSource, SourceCreate
from folder_order.models.moves import CopyToFolderRequest, MoveResult, MoveToFolderRequest
from folder_order.routes.deps import get_config, get_executor, get_refresher


router = APIRouter(prefix="/sources")
logger = logging.getLogger(__name__)


@router.post("", summary="Subscribe a source into a folder", status_code=201)
def post_source(
    payload: SourceCreate,
    config: AppConfig = Depends(get_config),
    refresher: EventListRefresher = Depends(get_refresher),
):
    folder_id = payload.folder_id or get_default_folder_id()
    position = next_position(read_snapshot(folder_id), config.ordering.step)
    created = create_source(payload.name, folder_id, position)
    publish(SOURCE_SUBSCRIBED, {"source_id": created["id"], "folder_id": folder_id, "position": position})
    refresher.reload_list(folder_id)
    return reload_response(CreatedSource(**created).model_dump(), refresher, status_code=201)


@router.post("/{source_id}/move-to-folder", summary="Move a source into another folder")
async def post_move_to_folder(
    source_id: str,
    payload: MoveToFolderRequest,
    executor: MoveExecutor = Depends(get_executor),
    refresher: EventListRefresher = Depends(get_refresher),
):
    position = await executor.move_to_collection(
        source_id,
        payload.from_folder_id,
        payload.to_folder_id,
        payload.anchor(),
        payload.side,
    )
    body = MoveResult(id=source_id, collection_id=payload.to_folder_id, position=position)
    return reload_response(body.model_dump(), refresher)


@router.post("/{source_id}/copy-to-folder", summary="Add a source to another folder")
async def post_copy_to_folder(
    source_id: str,
    payload: CopyToFolderRequest,
    executor: MoveExecutor = Depends(get_executor),
    refresher: EventListRefresher = Depends(get_refresher),
):
    position = await executor.copy_to_collection(source_id, payload.to_folder_id, payload.anchor(), payload.side)
    body = MoveResult(id=source_id, collection_id=payload.to_folder_id, position=position)
    return reload_response(body.model_dump(), refresher)


@router.post("/{source_id}/delete-from-folder", summary="Remove a source from one folder", status_code=204)
def post_delete_from_folder(
    source_id: str,
    from_folder_id: str,
    refresher: EventListRefresher = Depends(get_refresher),
):
    delete_source_from_folder(source_id, from_folder_id)
    publish(SOURCE_REMOVED, {"source_id": source_id, "folder_id": from_folder_id})
    refresher.reload_list(from_folder_id)
    return reload_response(None, refresher, status_code=204)


@router.post("/{source_id}/unsubscribe", summary="Delete a source and its memberships", status_code=204)
def post_unsubscribe(source_id: str, refresher: EventListRefresher = Depends(get_refresher)):
    delete_source(source_id)
    publish(SOURCE_REMOVED, {"source_id": source_id, "folder_id": None})
    # Memberships may span folders; the whole folder list re-renders
    refresher.reload_list(FOLDER_LIST)
    return reload_response(None, refresher, status_code=204)


__all__ = ["router"]
