"""Domain event constants, publisher, and the list-reload refresher.

``publish`` logs the event and buffers it for test observation.
``EventListRefresher`` is the ``ListRefresher`` used by HTTP routes: each
reload request becomes a ``list.reload`` event and is folded into a single
``HX-Trigger`` header value so the htmx front end re-renders the folder list.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, List
import json
import logging

logger = logging.getLogger(__name__)

LIST_RELOAD = "list.reload"
FOLDER_CREATED = "folder.created"
SOURCE_SUBSCRIBED = "source.subscribed"
SOURCE_REMOVED = "source.removed"
POSITIONS_RENUMBERED = "positions.renumbered"

# htmx event the folder list listens on
RELOAD_FOLDERS_TRIGGER = "reload-folders"


def publish(event_type: str, payload: Dict[str, Any]) -> None:
    """Publish a domain event.

    In this minimal implementation, we log the event for observability.
    """
    logger.info("event_publish type=%s payload=%s", event_type, payload)
    EVENT_BUFFER.append({"type": event_type, "payload": payload})


# Most recent domain events, exposed by the test-support routes
EVENT_BUFFER_SIZE = 500
EVENT_BUFFER: Deque[Dict[str, Any]] = deque(maxlen=EVENT_BUFFER_SIZE)


def get_buffered_events(clear: bool = True) -> List[Dict[str, Any]]:
    """Return buffered domain events; optionally clear the buffer."""
    events = list(EVENT_BUFFER)
    if clear:
        EVENT_BUFFER.clear()
    return events


class EventListRefresher:
    """Collects reload requests for one request/response cycle."""

    def __init__(self) -> None:
        self.collections: list[str] = []

    def reload_list(self, collection_id: str) -> None:
        if collection_id not in self.collections:
            self.collections.append(collection_id)
        publish(LIST_RELOAD, {"collection_id": collection_id})

    def hx_trigger(self) -> str | None:
        if not self.collections:
            return None
        return json.dumps({RELOAD_FOLDERS_TRIGGER: {"collections": list(self.collections)}})


__all__ = [
    "LIST_RELOAD",
    "FOLDER_CREATED",
    "SOURCE_SUBSCRIBED",
    "SOURCE_REMOVED",
    "POSITIONS_RENUMBERED",
    "RELOAD_FOLDERS_TRIGGER",
    "publish",
    "get_buffered_events",
    "EVENT_BUFFER",
    "EVENT_BUFFER_SIZE",
    "EventListRefresher",
]
