"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the bundled `migrations/` directory.
Skips rollback files. When a journal path is given, applied filenames are
recorded in that file-backed JSON journal and skipped on later runs; without
one every file is applied, so scripts must be idempotent. Intended for local
development and CI; production environments should use Alembic or the
platform's migration mechanism.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable
from datetime import datetime, timezone

from sqlalchemy.engine import Engine, Connection
import logging

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        # Skip rollback scripts in forward runs
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute SQL text, tolerating multi-statement files on SQLite.

    SQLite's DB-API (pysqlite) does not allow multiple statements in a single
    execute() call, so for SQLite whole-line ``--`` comments are dropped first
    and the remainder is split on ';', skipping empty segments. Other dialects
    receive the full script as-is.
    """
    name = (getattr(conn.dialect, "name", "") or "").lower()
    if "sqlite" in name:
        body = "\n".join(ln for ln in sql.splitlines() if not ln.strip().startswith("--"))
        for stmt in body.split(";"):
            s = stmt.strip()
            if not s:
                continue
            if s.upper() in {"BEGIN", "COMMIT", "END"}:
                continue
            conn.exec_driver_sql(s)
        return
    conn.exec_driver_sql(sql)


def _load_journal(journal_path: Path) -> list[dict]:
    if not journal_path.exists():
        return []
    try:
        data = json.loads(journal_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):  # pragma: no cover - start fresh on any parse error
        logger.error("migration_journal_parse_failed path=%s", str(journal_path), exc_info=True)
        return []
    if not isinstance(data, list):
        return []
    return [e for e in data if isinstance(e, dict)]


def apply_migrations(
    engine: Engine,
    migrations_dir: str | os.PathLike[str] = MIGRATIONS_DIR,
    journal_path: str | os.PathLike[str] | None = None,
) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir)
    if not root.exists():  # pragma: no cover - optional
        return []

    journal = Path(journal_path) if journal_path is not None else None
    journal_entries = _load_journal(journal) if journal is not None else []
    applied = {Path(e.get("filename", "")).name for e in journal_entries if isinstance(e.get("filename"), str)}

    newly_applied: list[str] = []
    with engine.begin() as conn:
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            logger.info("migration_applied file=%s", fname)
            newly_applied.append(fname)

            entry = {
                "filename": f"migrations/{fname}",
                # applied_at must be ISO-8601 UTC without fractional seconds (e.g., 2024-01-01T00:00:00Z)
                "applied_at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            }
            journal_entries.append(entry)
            if journal is not None:
                _atomic_write_json(journal, journal_entries)
    return newly_applied


def _atomic_write_json(path: Path, content: list[dict]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(json.dumps(content, ensure_ascii=False, indent=2), encoding="utf-8")
    os.replace(tmp_path, path)
