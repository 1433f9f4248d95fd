from __future__ import annotations

import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from folder_order.config import AppConfig, load_config
from folder_order.db.base import get_engine
from folder_order.db.migrations_runner import apply_migrations
from folder_order.http.problem import (
    handle_http_exception,
    handle_ordering_error,
    handle_request_validation_error,
    handle_unexpected_error,
)
from folder_order.http.request_id import RequestIdMiddleware
from folder_order.logging_setup import configure_logging
from folder_order.logic.errors import OrderingError
from folder_order.logic.repository_folders import SqlPositionStore
from folder_order.routes import api_router
from folder_order.routes.test_support import router as test_support_router

logger = logging.getLogger(__name__)


def _health_check(engine: Engine):
    def check() -> dict:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    Configures logging, resolves configuration, binds the shared engine and
    position store, applies migrations when enabled, and mounts the API under
    ``/api/v1``.
    """
    configure_logging(os.getenv("LOG_LEVEL"))
    config = config or load_config()
    engine = get_engine(config.database.dsn)

    if config.migrations.auto_apply:
        try:
            apply_migrations(engine, journal_path=config.migrations.journal_path)
        except Exception:
            logger.error("Failed to apply migrations at startup", exc_info=True)
            raise
    else:
        logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")

    app = FastAPI(title="folder-order")
    app.state.config = config
    app.state.position_store = SqlPositionStore(engine, step=config.ordering.step)

    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(OrderingError, handle_ordering_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix="/api/v1")
    if config.test_support:
        # No prefix: exposes '/__test__/events' and '/__test__/reset-state'
        app.include_router(test_support_router)

    health_check = _health_check(engine)

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    logger.info("app_created dialect=%s step=%s", engine.dialect.name, config.ordering.step)
    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
