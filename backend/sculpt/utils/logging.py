"""
Structured logging configuration.
Uses structlog for key/value log events, rendered as JSON in production.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from sculpt.config import settings


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict
) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = settings.app_name
    return event_dict


def _resolve_level() -> int:
    """Map the configured level name to a logging constant, DEBUG in debug mode."""
    if settings.debug:
        return logging.DEBUG
    level = logging.getLevelName(settings.log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    """
    Configure structlog for the service.

    Call this once during application startup.
    Debug mode renders colored console lines, otherwise one JSON object per event.
    """
    level = _resolve_level()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.debug:
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Third-party libraries (httpx, langchain) still log through stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Optional logger name for context.

    Usage:
        logger = get_logger(__name__)
        logger.info("Scene rendered", project_id=project_id, scene_number=2)
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(name=name)
    return logger


def bind_context(**kwargs: Any) -> None:
    """
    Bind context variables to all subsequent log entries of this task.

    Usage:
        bind_context(project_id=project_id)
        logger.info("Scene fan-out started")  # includes project_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def bound_context(**kwargs: Any):
    """
    Bind context variables for the duration of a block only.

    Previous values are restored on exit, so callers outside the request
    middleware do not leak ids into later log entries.

    Usage:
        with bound_context(project_id=project_id):
            logger.info("Scene fan-out started")
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
