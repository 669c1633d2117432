"""Logging setup for the warehouse service.

Records go through the standard library root logger; structlog renders them,
merging the ``tenant_id`` and request context bound during an action.
Production output is JSON, one event per line; elsewhere it is console text.
"""

import logging
import os
import sys
from typing import Any

import structlog

# Test runs stay quiet unless LOG_LEVEL asks otherwise
_LEVELS = {
    "production": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def _environment() -> str:
    return (os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """LOG_LEVEL if set, else the level for the current PROTEAN_ENV."""
    return os.getenv("LOG_LEVEL", _LEVELS.get(_environment(), "INFO")).upper()


def configure_logging() -> None:
    """Point stdlib logging at stdout and configure structlog on top of it."""
    level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [logging.StreamHandler(sys.stdout)]

    # Protean logs every UoW and handler dispatch at INFO
    logging.getLogger("protean").setLevel(logging.WARNING)

    if _environment() == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_context(**kwargs: Any) -> None:
    """Bind request-scoped values (request id, path, user) to later log lines."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
