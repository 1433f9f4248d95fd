"""Response helpers that carry the list-reload signal to the htmx front end."""

from __future__ import annotations

from typing import Any

from fastapi import Response
from fastapi.responses import JSONResponse

from folder_order.logic.events import EventListRefresher


def reload_response(content: Any, refresher: EventListRefresher, status_code: int = 200) -> Response:
    """Return ``content`` as JSON (or an empty 204) with an ``HX-Trigger`` header when lists changed."""
    headers: dict[str, str] = {}
    trigger = refresher.hx_trigger()
    if trigger:
        headers["HX-Trigger"] = trigger
    if status_code == 204:
        return Response(status_code=204, headers=headers)
    return JSONResponse(content, status_code=status_code, headers=headers)


__all__ = ["reload_response"]
