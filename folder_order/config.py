"""Configuration utilities for the folder ordering service.

This module loads application configuration with the following rules:
- Primary source: `folder_order_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("folder_order_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Recoverable: log and ignore unreadable override
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


class DatabaseConfig(BaseModel):
    dsn: str

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class OrderingConfig(BaseModel):
    # A step of 1 would leave no gap after renumbering
    step: int = Field(default=1000, gt=1)


class MigrationsConfig(BaseModel):
    auto_apply: bool = Field(default=True)
    journal_path: Optional[str] = None


class AppConfig(BaseModel):
    database: DatabaseConfig
    ordering: OrderingConfig
    migrations: MigrationsConfig
    # Mounts the /__test__ routes that expose the domain event buffer
    test_support: bool = False


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:  # pragma: no cover
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) folder_order_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or "sqlite+pysqlite:///:memory:"
    )
    step_text = _env("POSITION_STEP") or _read_config_file("ordering.step") or _base("ordering.step", "1000")
    auto_apply_text = (
        _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("migrations.auto_apply") or _base("migrations.auto_apply", "true")
    )
    journal_path = _env("MIGRATIONS_JOURNAL") or _read_config_file("migrations.journal") or _base("migrations.journal_path")
    test_support_text = _env("ENABLE_TEST_SUPPORT") or _read_config_file("test_support") or _base("test_support", "false")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn),
            ordering=OrderingConfig(step=str(step_text).strip()),
            migrations=MigrationsConfig(
                auto_apply=str(auto_apply_text).strip().lower() in {"1", "true", "yes"},
                journal_path=journal_path,
            ),
            test_support=str(test_support_text).strip().lower() in {"1", "true", "yes"},
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "OrderingConfig",
    "MigrationsConfig",
    "load_config",
]
