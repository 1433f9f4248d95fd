"""FastAPI application package for the folder ordering service.

Folders and the sources nested under them are ordered by sparse integer
positions. The ordering core (``folder_order.logic.positions``, ``cleanup``
and ``move_executor``) is transport-free; this package wires it to a
SQLAlchemy store and HTTP routes. Business logic lives in
`folder_order/logic/` and route handlers in `folder_order/routes/`.
"""

from __future__ import annotations

from folder_order.main import create_app

__all__ = ["create_app"]
