"""Pydantic request models for reorder actions.

A null ``anchor_id`` targets the edge of the collection: the end for
``side="after"`` and the start for ``side="before"``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from folder_order.logic.snapshot import Anchor, Edge, Side


class MoveRequest(BaseModel):
    anchor_id: Optional[str] = None
    side: Side = Side.AFTER

    def anchor(self) -> Anchor:
        if self.anchor_id is None:
            return Edge.END if self.side is Side.AFTER else Edge.START
        return self.anchor_id


class MoveToFolderRequest(MoveRequest):
    from_folder_id: str = Field(min_length=1)
    to_folder_id: str = Field(min_length=1)


class CopyToFolderRequest(MoveRequest):
    to_folder_id: str = Field(min_length=1)


class MoveResult(BaseModel):
    id: str
    collection_id: str
    position: int


class CleanupResult(BaseModel):
    collection_id: str
    renumbered: int


__all__ = [
    "MoveRequest",
    "MoveToFolderRequest",
    "CopyToFolderRequest",
    "MoveResult",
    "CleanupResult",
]
