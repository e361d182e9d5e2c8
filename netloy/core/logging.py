"""
Structured logging configuration for netloy.

Uses structlog for structured, context-rich logging that supports both human-readable
console output and JSON format for CI environments. Every event passes through a
redaction processor so signing credentials never reach a log line.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from ..tools.sanitizer import Sanitizer
    from .config import Settings

_active_sanitizer: ContextVar[Sanitizer | None] = ContextVar("netloy_sanitizer", default=None)


def use_sanitizer(sanitizer: Sanitizer | None) -> None:
    """Install the sanitizer applied to every subsequent log event in this context.

    Args:
        sanitizer: Sanitizer holding the secrets of the current build, or None to disable.
    """
    _active_sanitizer.set(sanitizer)


def redact_secrets(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """structlog processor replacing configured secrets in every string field."""
    sanitizer = _active_sanitizer.get()
    if sanitizer is None:
        return event_dict
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = sanitizer.sanitize(value)
    return event_dict


def setup_logging(settings: Settings | None = None, verbose: bool = False) -> None:
    """Configure structured logging for the application.

    Args:
        settings: Optional settings. If None, uses INFO level.
        verbose: Force DEBUG level regardless of settings.
    """
    log_level = "DEBUG" if verbose else (settings.log_level if settings else "INFO")
    level = getattr(logging, log_level, logging.INFO)

    # Configure standard library logging
    console = Console(stderr=True)
    handler = RichHandler(
        console=console,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if sys.stderr.isatty():
        # Human-readable format for development
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        # JSON format for CI
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured bound logger
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log entries in this context.

    Args:
        **kwargs: Context key-value pairs to bind
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
