"""
Structured Logging with structlog

Event-style logging for the indexing pass:

    logger = get_logger(__name__)
    logger.debug("identity_allocated", symbol="s1", node=15)
"""

import logging
import sys

import structlog
from structlog.contextvars import merge_contextvars

from .config import get_settings


def setup_logging(level: str | None = None, format: str | None = None) -> None:
    """
    Setup structured logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL), settings.log_level if omitted
        format: Output format ("json" for production, "console" for development), settings.log_format if omitted
    """
    settings = get_settings()
    level = level or settings.log_level
    format = format or settings.log_format
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    shared_processors = [
        merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if format == "json":
        output_processors = [
            structlog.processors.EventRenamer("message"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        output_processors = [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]

    structlog.configure(
        processors=shared_processors + output_processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__ from calling module)
    """
    return structlog.get_logger(name)
