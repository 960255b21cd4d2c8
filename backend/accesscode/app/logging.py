"""Logging configuration helpers for the access code engine."""
from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def _resolve_log_level(level: str | int | None) -> int:
    if isinstance(level, int): return level
    if isinstance(level, str): return getattr(logging, level.upper(), logging.INFO)
    return logging.INFO


def setup_logging(*, level: str | int | None = None) -> None:
    env_level = os.getenv("LOG_LEVEL")
    resolved = _resolve_log_level(level or env_level)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(resolved)
        for handler in root.handlers:
            handler.setLevel(resolved)
    else:
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=resolved)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.JSONRenderer(),
    ]
    structlog.configure(
        processors=processors,
        context_class=dict,
        cache_logger_on_first_use=False,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        wrapper_class=structlog.make_filtering_bound_logger(resolved),
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_contextvars(**kwargs: Any) -> None: structlog.contextvars.bind_contextvars(**kwargs)
def clear_contextvars() -> None: structlog.contextvars.clear_contextvars()

__all__ = ["bind_contextvars", "clear_contextvars", "get_logger", "setup_logging"]
