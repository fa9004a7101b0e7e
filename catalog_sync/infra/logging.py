"""Structured logging configuration using structlog.

Every event carries the service name and environment. Logs are JSON
outside development and colored console output while developing. Events
emitted while a UI intent is being handled also carry the intent name
(see ``intent_context``).
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from catalog_sync.config import settings

SERVICE_NAME = "catalog-sync"


def add_service_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Stamp service and environment onto every event."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _resolve_level(level: str | None) -> int:
    if settings.debug and level is None:
        return logging.DEBUG
    name = (level or settings.log_level).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """Configure structlog for the application.

    Args:
        level: Log level name; defaults to settings (DEBUG when ``debug`` is on)
        json_output: Force JSON or console output; defaults to JSON outside dev
    """
    log_level = _resolve_level(level)
    if json_output is None:
        json_output = settings.log_json and settings.environment != "dev"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Request-level noise from the HTTP stack; catalog events already log outcomes
    for noisy in ("uvicorn", "uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@contextmanager
def intent_context(intent: str, **context: Any) -> Iterator[None]:
    """Bind ``intent`` (and extra context) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(intent=intent, **context):
        yield


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (usually __name__)
        **initial_context: Initial context to bind to the logger

    Returns:
        Bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
