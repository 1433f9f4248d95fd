"""Logging bootstrap for the folder ordering service.

One stdout handler on the root logger carries every ``folder_order.*`` module
logger and uvicorn's own output. ``LOG_LEVEL=DEBUG`` surfaces fast-path
allocations and snapshot reads.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig

DEFAULT_LEVEL = "INFO"


def _logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["stdout"]},
        # uvicorn installs its own handlers; route them through ours instead
        "loggers": {
            name: {"handlers": [], "propagate": True}
            for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Install the stdout handler unless the root logger is already configured."""
    if logging.getLogger().handlers:
        return
    dictConfig(_logging_config((level or DEFAULT_LEVEL).upper()))
