"""Structured logging with structlog.

Events are named ``feature.action.state`` (e.g. ``seeder.run.completed``).
Request handlers get ``request_id`` from :data:`request_id_ctx`; long-running
jobs such as a seed run bind their own context with
``structlog.contextvars.bound_contextvars``.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any

import structlog

from app.core.config import get_settings

# Context variable for request correlation
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Library loggers that are too chatty at INFO
NOISY_LOGGERS = ("sqlalchemy.engine", "asyncpg", "httpx")


def add_request_id(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add request_id from context to log events."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _configure_stdlib(level: int) -> None:
    """Send uvicorn, SQLAlchemy and alembic records to stdout at ``level``."""
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def configure_logging(level: str | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Log level override (e.g. "DEBUG" for verbose CLI runs).
            Falls back to ``settings.log_level``.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper())

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        # level may change between CLI invocations in one process (tests)
        cache_logger_on_first_use=False,
    )
    _configure_stdlib(log_level)


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a logger; ``name`` is usually the calling module's ``__name__``."""
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger
