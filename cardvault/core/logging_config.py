"""
structlog setup, applied once on import.

Production (ENVIRONMENT=production) renders one JSON object per event for the
log pipeline; everywhere else renders console lines. Request id, path and
method are merged in from contextvars bound by the request middleware.

Usage:
    from cardvault.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("portfolio summary built", holdings=42, current_value=1234.5)
"""

import logging
import sys
from typing import Any

import structlog

from cardvault.core.config import settings

IS_PRODUCTION = settings.ENVIRONMENT == "production"
LOG_LEVEL = logging.getLevelName(settings.LOG_LEVEL.upper())


def configure_logging() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if IS_PRODUCTION:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (uvicorn, SQLAlchemy, Sentry) to the same stream
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=LOG_LEVEL)

    # SQL echo is controlled by DATABASE_ECHO, not the log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()
