"""Folder and source data access helpers plus the SQL-backed position store.

These functions encapsulate SQL for the folder list, per-folder source
membership, and the positions that order them, keeping route handlers free of
persistence details. ``SqlPositionStore`` adapts the blocking helpers to the
async ``PositionStore`` protocol by running them in a worker thread.

Collections: ``FOLDER_LIST`` holds every non-default folder; each folder id
names the collection of its sources. The default (root) folder is always
listed first and never takes part in folder-list ordering.
"""

from __future__ import annotations

from contextlib import contextmanager
from functools import partial
from typing import Iterator, Optional
import logging
import uuid

import anyio
from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from folder_order.db.base import get_engine
from folder_order.logic.errors import MembershipConflict, NotFound, StoreFailure
from folder_order.logic.positions import STEP
from folder_order.logic.snapshot import FOLDER_LIST, Snapshot

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str, **context: object) -> Iterator[None]:
    """Translate SQLAlchemy failures into the store error taxonomy."""
    try:
        yield
    except IntegrityError as exc:
        logger.error("%s integrity violation context=%s", operation, context, exc_info=True)
        raise MembershipConflict(f"{operation} rejected by constraint: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        logger.error("%s failed context=%s", operation, context, exc_info=True)
        raise StoreFailure(f"{operation} failed") from exc


def _folder_row(conn: Connection, folder_id: str):  # type: ignore[no-untyped-def]
    return conn.execute(
        sql_text("SELECT folder_id, name, position, is_default FROM folders WHERE folder_id = :fid"),
        {"fid": folder_id},
    ).fetchone()


def _ensure_folder(conn: Connection, folder_id: str) -> None:
    if _folder_row(conn, folder_id) is None:
        raise NotFound("collection", folder_id)


def _snapshot_rows(conn: Connection, collection_id: str) -> list[tuple[str, int]]:
    if collection_id == FOLDER_LIST:
        rows = conn.execute(
            sql_text(
                "SELECT folder_id, position FROM folders WHERE is_default = :d ORDER BY position ASC, folder_id ASC"
            ),
            {"d": False},
        ).fetchall()
    else:
        _ensure_folder(conn, collection_id)
        rows = conn.execute(
            sql_text(
                "SELECT source_id, position FROM folder_sources WHERE folder_id = :fid ORDER BY position ASC, source_id ASC"
            ),
            {"fid": collection_id},
        ).fetchall()
    return [(str(r[0]), int(r[1])) for r in rows]


def read_snapshot(collection_id: str, engine: Engine | None = None) -> Snapshot:
    eng = engine or get_engine()
    with _store_errors("read_snapshot", collection=collection_id):
        with eng.connect() as conn:
            rows = _snapshot_rows(conn, collection_id)
    return Snapshot.from_rows(collection_id, rows)


def renumber(collection_id: str, step: int = STEP, engine: Engine | None = None) -> int:
    """Re-space a collection at ``step, 2*step, ...`` preserving current order.

    Two-phase write inside one transaction: first shift every row above the
    largest target value, then write final values, so the unique position
    index never sees a transient duplicate. Returns the number of rows.
    """
    eng = engine or get_engine()
    with _store_errors("renumber", collection=collection_id):
        with eng.begin() as conn:
            rows = _snapshot_rows(conn, collection_id)
            if not rows:
                return 0
            offset = max(max(pos for _, pos in rows), len(rows) * step) + 1
            if collection_id == FOLDER_LIST:
                conn.execute(
                    sql_text("UPDATE folders SET position = position + :off WHERE is_default = :d"),
                    {"off": offset, "d": False},
                )
                for idx, (folder_id, _) in enumerate(rows):
                    conn.execute(
                        sql_text("UPDATE folders SET position = :pos WHERE folder_id = :fid"),
                        {"pos": (idx + 1) * step, "fid": folder_id},
                    )
            else:
                conn.execute(
                    sql_text("UPDATE folder_sources SET position = position + :off WHERE folder_id = :fid"),
                    {"off": offset, "fid": collection_id},
                )
                for idx, (source_id, _) in enumerate(rows):
                    conn.execute(
                        sql_text(
                            "UPDATE folder_sources SET position = :pos WHERE folder_id = :fid AND source_id = :sid"
                        ),
                        {"pos": (idx + 1) * step, "fid": collection_id, "sid": source_id},
                    )
    logger.info("renumber collection=%s rows=%s step=%s", collection_id, len(rows), step)
    return len(rows)


def persist_move(
    item_id: str,
    collection_id: str,
    position: int,
    from_collection_id: Optional[str] = None,
    engine: Engine | None = None,
) -> None:
    eng = engine or get_engine()
    if FOLDER_LIST in (collection_id, from_collection_id) and from_collection_id not in (None, collection_id):
        # Folders and sources never change collection kind
        raise NotFound("collection", FOLDER_LIST)
    with _store_errors("persist_move", item=item_id, collection=collection_id, position=position):
        with eng.begin() as conn:
            if collection_id == FOLDER_LIST:
                result = conn.execute(
                    sql_text("UPDATE folders SET position = :pos WHERE folder_id = :fid AND is_default = :d"),
                    {"pos": position, "fid": item_id, "d": False},
                )
                if result.rowcount == 0:
                    raise NotFound("folder", item_id)
                return
            _ensure_folder(conn, collection_id)
            if from_collection_id is None or from_collection_id == collection_id:
                result = conn.execute(
                    sql_text(
                        "UPDATE folder_sources SET position = :pos WHERE folder_id = :fid AND source_id = :sid"
                    ),
                    {"pos": position, "fid": collection_id, "sid": item_id},
                )
                if result.rowcount == 0:
                    raise NotFound("item", item_id)
                return
            _ensure_folder(conn, from_collection_id)
            result = conn.execute(
                sql_text("DELETE FROM folder_sources WHERE folder_id = :fid AND source_id = :sid"),
                {"fid": from_collection_id, "sid": item_id},
            )
            if result.rowcount == 0:
                raise NotFound("item", item_id)
            conn.execute(
                sql_text("INSERT INTO folder_sources (folder_id, source_id, position) VALUES (:fid, :sid, :pos)"),
                {"fid": collection_id, "sid": item_id, "pos": position},
            )


def persist_copy(source_id: str, folder_id: str, position: int, engine: Engine | None = None) -> None:
    eng = engine or get_engine()
    if folder_id == FOLDER_LIST:
        raise NotFound("collection", FOLDER_LIST)
    with _store_errors("persist_copy", item=source_id, collection=folder_id, position=position):
        with eng.begin() as conn:
            _ensure_folder(conn, folder_id)
            if _source_row(conn, source_id) is None:
                raise NotFound("source", source_id)
            conn.execute(
                sql_text("INSERT INTO folder_sources (folder_id, source_id, position) VALUES (:fid, :sid, :pos)"),
                {"fid": folder_id, "sid": source_id, "pos": position},
            )


class SqlPositionStore:
    """``PositionStore`` over the relational schema.

    Each call runs the blocking helper above in a worker thread and awaits it,
    so a re-read issued after ``renumber`` returns observes committed state.
    """

    def __init__(self, engine: Engine | None = None, *, step: int = STEP) -> None:
        self.engine = engine
        self.step = step

    async def read_snapshot(self, collection_id: str) -> Snapshot:
        return await anyio.to_thread.run_sync(partial(read_snapshot, collection_id, engine=self.engine))

    async def renumber(self, collection_id: str) -> None:
        await anyio.to_thread.run_sync(partial(renumber, collection_id, self.step, engine=self.engine))

    async def persist_move(
        self,
        item_id: str,
        collection_id: str,
        position: int,
        *,
        from_collection_id: Optional[str] = None,
    ) -> None:
        await anyio.to_thread.run_sync(
            partial(
                persist_move,
                item_id,
                collection_id,
                position,
                from_collection_id=from_collection_id,
                engine=self.engine,
            )
        )

    async def persist_copy(self, item_id: str, collection_id: str, position: int) -> None:
        await anyio.to_thread.run_sync(partial(persist_copy, item_id, collection_id, position, engine=self.engine))


# ---------------------------------------------------------------------------
# Projections and membership management used by the HTTP routes
# ---------------------------------------------------------------------------


def _source_row(conn: Connection, source_id: str):  # type: ignore[no-untyped-def]
    return conn.execute(
        sql_text("SELECT source_id, name FROM sources WHERE source_id = :sid"),
        {"sid": source_id},
    ).fetchone()


def get_default_folder_id(engine: Engine | None = None) -> str:
    eng = engine or get_engine()
    with _store_errors("get_default_folder_id"):
        with eng.connect() as conn:
            row = conn.execute(
                sql_text("SELECT folder_id FROM folders WHERE is_default = :d ORDER BY folder_id LIMIT 1"),
                {"d": True},
            ).fetchone()
    if row is None:
        raise NotFound("folder", "default")
    return str(row[0])


def get_folder(folder_id: str, engine: Engine | None = None) -> dict | None:
    eng = engine or get_engine()
    with _store_errors("get_folder", folder=folder_id):
        with eng.connect() as conn:
            row = _folder_row(conn, folder_id)
    if row is None:
        return None
    return {"id": str(row[0]), "name": str(row[1]), "position": int(row[2]), "is_default": bool(row[3])}


def list_folders(
    exclude_folder_id: Optional[str] = None,
    include_default: bool = True,
    step: int = STEP,
    engine: Engine | None = None,
) -> list[dict]:
    """Return folders in display order, each with the next free source position.

    The default folder comes first when ``include_default`` is set; the rest
    follow by position. ``exclude_folder_id`` drops one folder, typically the
    one a source is currently in when offering move targets.
    """
    eng = engine or get_engine()
    with _store_errors("list_folders"):
        with eng.connect() as conn:
            rows = conn.execute(
                sql_text(
                    "SELECT folder_id, name, position, is_default FROM folders ORDER BY is_default DESC, position ASC, folder_id ASC"
                )
            ).fetchall()
            max_rows = conn.execute(
                sql_text("SELECT folder_id, MAX(position) FROM folder_sources GROUP BY folder_id")
            ).fetchall()
    max_by_folder = {str(r[0]): int(r[1]) for r in max_rows if r[1] is not None}
    folders: list[dict] = []
    for r in rows:
        folder_id = str(r[0])
        is_default = bool(r[3])
        if folder_id == exclude_folder_id:
            continue
        if is_default and not include_default:
            continue
        last = max_by_folder.get(folder_id)
        folders.append(
            {
                "id": folder_id,
                "name": str(r[1]),
                "position": int(r[2]),
                "is_default": is_default,
                "next_position": step if last is None else last + step,
            }
        )
    return folders


def create_folder(name: str, position: int, engine: Engine | None = None) -> dict:
    eng = engine or get_engine()
    folder_id = str(uuid.uuid4())
    with _store_errors("create_folder", name=name, position=position):
        with eng.begin() as conn:
            conn.execute(
                sql_text(
                    "INSERT INTO folders (folder_id, name, position, is_default) VALUES (:fid, :name, :pos, :d)"
                ),
                {"fid": folder_id, "name": name, "pos": position, "d": False},
            )
    logger.info("create_folder folder=%s position=%s", folder_id, position)
    return {"id": folder_id, "name": name, "position": position, "is_default": False}


def update_folder_position(folder_id: str, position: int, engine: Engine | None = None) -> None:
    """Set a folder's position verbatim; collisions surface as ``MembershipConflict``."""
    persist_move(folder_id, FOLDER_LIST, position, engine=engine)


def list_sources_in_folder(
    folder_id: str,
    exclude_source_id: Optional[str] = None,
    engine: Engine | None = None,
) -> list[dict]:
    eng = engine or get_engine()
    with _store_errors("list_sources_in_folder", folder=folder_id):
        with eng.connect() as conn:
            _ensure_folder(conn, folder_id)
            rows = conn.execute(
                sql_text(
                    "SELECT s.source_id, s.name, fs.position FROM folder_sources fs "
                    "JOIN sources s ON s.source_id = fs.source_id "
                    "WHERE fs.folder_id = :fid ORDER BY fs.position ASC, s.source_id ASC"
                ),
                {"fid": folder_id},
            ).fetchall()
    return [
        {"id": str(r[0]), "name": str(r[1]), "position": int(r[2])}
        for r in rows
        if str(r[0]) != exclude_source_id
    ]


def create_source(name: str, folder_id: str, position: int, engine: Engine | None = None) -> dict:
    """Insert a source and its first folder membership in one transaction."""
    eng = engine or get_engine()
    source_id = str(uuid.uuid4())
    with _store_errors("create_source", name=name, folder=folder_id, position=position):
        with eng.begin() as conn:
            _ensure_folder(conn, folder_id)
            conn.execute(
                sql_text("INSERT INTO sources (source_id, name) VALUES (:sid, :name)"),
                {"sid": source_id, "name": name},
            )
            conn.execute(
                sql_text("INSERT INTO folder_sources (folder_id, source_id, position) VALUES (:fid, :sid, :pos)"),
                {"fid": folder_id, "sid": source_id, "pos": position},
            )
    logger.info("create_source source=%s folder=%s position=%s", source_id, folder_id, position)
    return {"id": source_id, "name": name, "position": position, "folder_id": folder_id}


def delete_source_from_folder(source_id: str, folder_id: str, engine: Engine | None = None) -> None:
    eng = engine or get_engine()
    with _store_errors("delete_source_from_folder", source=source_id, folder=folder_id):
        with eng.begin() as conn:
            result = conn.execute(
                sql_text("DELETE FROM folder_sources WHERE folder_id = :fid AND source_id = :sid"),
                {"fid": folder_id, "sid": source_id},
            )
            if result.rowcount == 0:
                raise NotFound("item", source_id)


def delete_source(source_id: str, engine: Engine | None = None) -> None:
    """Remove a source and every folder membership it has."""
    eng = engine or get_engine()
    with _store_errors("delete_source", source=source_id):
        with eng.begin() as conn:
            conn.execute(sql_text("DELETE FROM folder_sources WHERE source_id = :sid"), {"sid": source_id})
            result = conn.execute(sql_text("DELETE FROM sources WHERE source_id = :sid"), {"sid": source_id})
            if result.rowcount == 0:
                raise NotFound("source", source_id)
