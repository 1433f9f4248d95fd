"""FastAPI dependencies wiring the ordering core to the running application.

The position store and configuration are created once by ``create_app`` and
kept on ``app.state``. A fresh ``EventListRefresher`` is created per request
and shared (via FastAPI's per-request dependency cache) between the route and
its ``MoveExecutor`` so the route can emit the collected reload trigger.
"""

from __future__ import annotations

from fastapi import Depends, Request

from folder_order.config import AppConfig
from folder_order.logic.events import EventListRefresher
from folder_order.logic.move_executor import MoveExecutor
from folder_order.logic.repository_folders import SqlPositionStore


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_store(request: Request) -> SqlPositionStore:
    return request.app.state.position_store


def get_refresher() -> EventListRefresher:
    return EventListRefresher()


def get_executor(
    store: SqlPositionStore = Depends(get_store),
    refresher: EventListRefresher = Depends(get_refresher),
) -> MoveExecutor:
    return MoveExecutor(store, refresher, step=store.step)


__all__ = ["get_config", "get_store", "get_refresher", "get_executor"]
