"""APIRouter registration for the folder ordering service."""

from __future__ import annotations

from fastapi import APIRouter

from folder_order.routes.cleanup import router as cleanup_router
from folder_order.routes.folders import router as folders_router
from folder_order.routes.sources import router as sources_router

api_router = APIRouter()
api_router.include_router(folders_router, tags=["Folders"])
api_router.include_router(sources_router, tags=["Sources"])
api_router.include_router(cleanup_router, tags=["Cleanup"])

__all__ = ["api_router"]
