"""Pydantic models for folder and source payloads."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class FolderCreate(BaseModel):
    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class FolderPositionUpdate(BaseModel):
    position: int = Field(ge=0)


class FolderSummary(BaseModel):
    id: str
    name: str
    position: int
    is_default: bool
    next_position: int


class SourceCreate(FolderCreate):
    # Subscriptions land in the default folder when omitted
    folder_id: Optional[str] = None


class SourceSummary(BaseModel):
    id: str
    name: str
    position: int


class CreatedSource(SourceSummary):
    folder_id: str


class CreatedFolder(BaseModel):
    id: str
    name: str
    position: int
    is_default: bool = False


__all__ = [
    "FolderCreate",
    "FolderPositionUpdate",
    "FolderSummary",
    "SourceCreate",
    "SourceSummary",
    "CreatedSource",
    "CreatedFolder",
]
