"""Functional test bootstrap.

Each test that needs persistence gets its own file-backed SQLite database
under pytest's ``tmp_path`` with migrations applied, so tests never share
positions. The domain event buffer is cleared around every test.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy.engine import Engine

from folder_order.config import AppConfig, DatabaseConfig, MigrationsConfig, OrderingConfig
from folder_order.db.base import get_engine, reset_engine
from folder_order.db.migrations_runner import apply_migrations
from folder_order.logic import events


@pytest.fixture(autouse=True)
def clear_event_buffer() -> Iterator[None]:
    events.EVENT_BUFFER.clear()
    yield
    events.EVENT_BUFFER.clear()


@pytest.fixture()
def db_url(tmp_path) -> str:
    return f"sqlite+pysqlite:///{tmp_path / 'folder_order.db'}"


@pytest.fixture()
def app_config(db_url: str) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(dsn=db_url),
        ordering=OrderingConfig(step=1000),
        migrations=MigrationsConfig(auto_apply=True),
        test_support=True,
    )


@pytest.fixture()
def engine(db_url: str) -> Iterator[Engine]:
    eng = get_engine(db_url)
    apply_migrations(eng)
    yield eng
    reset_engine()


@pytest.fixture()
def client(app_config: AppConfig):
    from fastapi.testclient import TestClient
    from folder_order.main import create_app

    app = create_app(app_config)
    with TestClient(app) as test_client:
        yield test_client
    reset_engine()
