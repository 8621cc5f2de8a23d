"""Structured logging configuration for websearch-gateway."""

import logging
import sys
from typing import Any

from websearch_gateway.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "asctime",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class StructuredFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base_msg = super().format(record)
        extras = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        ]
        if extras:
            return f"{base_msg} | {' '.join(extras)}"
        return base_msg


def setup_logger(
    name: str,
    level: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """Set up a logger with structured formatting.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, uses settings.log_level
        format_string: Custom format string. If None, uses default format

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    log_level = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, log_level))

    # Avoid adding multiple handlers if logger already configured
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, log_level))

    if format_string is None:
        format_string = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

    handler.setFormatter(StructuredFormatter(format_string, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: Any,
) -> None:
    """Log a message with additional context fields."""
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
