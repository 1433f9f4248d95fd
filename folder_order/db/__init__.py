"""Database bootstrap utilities for the folder ordering service.

This module exposes convenience imports for engine construction and the
migrations runner that applies SQL files from the bundled migrations/
directory. Repositories issue textual SQL; no ORM models are defined.
"""

from folder_order.db.base import get_engine, reset_engine
from folder_order.db.migrations_runner import MIGRATIONS_DIR, apply_migrations

__all__ = [
    "get_engine",
    "reset_engine",
    "MIGRATIONS_DIR",
    "apply_migrations",
]
