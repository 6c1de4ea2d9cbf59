"""Structured logging for xunit-core.

This module provides structured logging functions used across the runner,
the data provider resolver and the mock object engine. Messages are routed
through structlog so that every entry carries its structured fields.

Example:
    >>> from xunit_core import log_info, log_error
    >>>
    >>> log_info("Test suite loaded", {
    ...     "suite": "GreeterTest",
    ...     "tests": 4
    ... })
    >>>
    >>> try:
    ...     run()
    ... except Exception as e:
    ...     log_error(f"Run aborted: {e}", {
    ...         "error_type": type(e).__name__
    ...     })
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from .types import LogContext

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_logger = structlog.get_logger("xunit_core")


def configure_logging(level: str = "warn") -> None:
    """Configure structlog for the command line and set the minimum level.

    Library code only logs; the process-wide setup is left to whoever calls
    this, which is ``xunit_core.cli.main`` for command line runs.

    Args:
        level: One of trace, debug, info, warn, error.

    Raises:
        ValueError: If the level is unknown.

    Example:
        >>> configure_logging("debug")
    """
    try:
        numeric = _LEVELS[level]
    except KeyError:
        raise ValueError(f"Unknown log level: {level}") from None

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log at error level.

    Used for failures that abort the run or leave a suite unloadable.

    Args:
        message: Human-readable message.
        fields: Structured context, as a dict or a LogContext.
    """
    _logger.error(message, **_normalize_fields(fields))


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log at warn level.

    Use this for degraded operation, such as a test that could not be
    prepared or a data provider that was rejected.
    """
    _logger.warning(message, **_normalize_fields(fields))


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log at info level.

    Use this for runner lifecycle transitions.
    """
    _logger.info(message, **_normalize_fields(fields))


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log at debug level."""
    _logger.debug(message, **_normalize_fields(fields))


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log at trace level.

    Trace output is emitted at debug level and tagged with ``trace=True``;
    it covers per-invocation detail of the mock object engine.
    """
    _logger.debug(message, trace=True, **_normalize_fields(fields))


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str]:
    """Flatten structured fields into string values; unset LogContext fields are dropped."""
    if fields is None:
        return {}

    if isinstance(fields, LogContext):
        return {k: str(v) for k, v in fields.model_dump().items() if v is not None}

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
