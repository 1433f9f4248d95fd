"""Folder list and per-folder source ordering endpoints.

Implements:
- GET  /folders                                   folder projection with next positions
- POST /folders                                   create a folder at the end of the list
- POST /folders/{folder_id}/update                set a folder position verbatim
- POST /folders/{folder_id}/move                  move a folder before/after a sibling
- GET  /folders/{folder_id}/sources               sources of one folder in order
- POST /folders/{folder_id}/sources/{source_id}/move
                                                  move a source inside its folder
"""

from __future__ import annotations

from typing import Optional
import logging

from fastapi import APIRouter, Depends, Request

from folder_order.config import AppConfig
from folder_order.http.hx import reload_response
from folder_order.logic.events import FOLDER_CREATED, EventListRefresher, publish
from folder_order.logic.move_executor import MoveExecutor
from folder_order.logic.positions import next_position
from folder_order.logic.repository_folders import (
    create_folder,
    list_folders,
    list_sources_in_folder,
    read_snapshot,
    update_folder_position,
)
from folder_order.logic.snapshot import FOLDER_LIST
from folder_order.models.folders import (
    CreatedFolder,
    FolderCreate,
    FolderPositionUpdate,
    FolderSummary,
    SourceSummary,
)
from folder_order.models.moves import MoveRequest, MoveResult
from folder_order.routes.deps import get_config, get_executor, get_refresher


router = APIRouter(prefix="/folders")
logger = logging.getLogger(__name__)


@router.get("", summary="List folders in display order", response_model=list[FolderSummary])
def get_folders(
    exclude_folder_id: Optional[str] = None,
    include_default: bool = True,
    config: AppConfig = Depends(get_config),
) -> list[dict]:
    return list_folders(exclude_folder_id, include_default, step=config.ordering.step)


@router.post("", summary="Create a folder at the end of the folder list", status_code=201)
def post_folder(
    payload: FolderCreate,
    config: AppConfig = Depends(get_config),
    refresher: EventListRefresher = Depends(get_refresher),
):
    position = next_position(read_snapshot(FOLDER_LIST), config.ordering.step)
    created = create_folder(payload.name, position)
    publish(FOLDER_CREATED, {"folder_id": created["id"], "position": position})
    refresher.reload_list(FOLDER_LIST)
    return reload_response(CreatedFolder(**created).model_dump(), refresher, status_code=201)


@router.post("/{folder_id}/update", summary="Set a folder position explicitly")
def post_folder_position(
    folder_id: str,
    payload: FolderPositionUpdate,
    refresher: EventListRefresher = Depends(get_refresher),
):
    update_folder_position(folder_id, payload.position)
    logger.info("folder_position_update folder=%s position=%s", folder_id, payload.position)
    refresher.reload_list(FOLDER_LIST)
    body = MoveResult(id=folder_id, collection_id=FOLDER_LIST, position=payload.position)
    return reload_response(body.model_dump(), refresher)


@router.post("/{folder_id}/move", summary="Move a folder before or after a sibling folder")
async def post_folder_move(
    folder_id: str,
    payload: MoveRequest,
    executor: MoveExecutor = Depends(get_executor),
    refresher: EventListRefresher = Depends(get_refresher),
):
    position = await executor.move_item(folder_id, FOLDER_LIST, payload.anchor(), payload.side)
    body = MoveResult(id=folder_id, collection_id=FOLDER_LIST, position=position)
    return reload_response(body.model_dump(), refresher)


@router.get("/{folder_id}/sources", summary="List the sources of a folder", response_model=list[SourceSummary])
def get_folder_sources(folder_id: str, exclude_source_id: Optional[str] = None) -> list[dict]:
    return list_sources_in_folder(folder_id, exclude_source_id)


@router.post("/{folder_id}/sources/{source_id}/move", summary="Move a source before or after a sibling source")
async def post_source_move(
    folder_id: str,
    source_id: str,
    payload: MoveRequest,
    request: Request,
    executor: MoveExecutor = Depends(get_executor),
    refresher: EventListRefresher = Depends(get_refresher),
):
    logger.info(
        "source_move request_id=%s folder=%s source=%s anchor=%s side=%s",
        request.scope.get("state", {}).get("request_id"),
        folder_id,
        source_id,
        payload.anchor_id,
        payload.side.value,
    )
    position = await executor.move_item(source_id, folder_id, payload.anchor(), payload.side)
    body = MoveResult(id=source_id, collection_id=folder_id, position=position)
    return reload_response(body.model_dump(), refresher)


__all__ = ["router"]
