"""
Logging Utility - Structured JSON Logging

Provides centralized, structured logging configuration for all relay components.
Supports JSON format for production and human-readable format for development.

Modules keep using stdlib loggers; structlog renders their records, including
any `extra={...}` fields.

Usage:
    from utils.logging import get_logger, setup_logging

    setup_logging(level="INFO", format_type="json")
    logger = get_logger(__name__)
    logger.info("Scores forwarded", extra={"count": 50, "cursor": 123})
"""

import logging
import sys
from typing import Any, Callable, Optional

import orjson
import structlog


def _orjson_dumps(obj: Any, default: Optional[Callable[[Any], Any]] = None, **kwargs: Any) -> str:
    return orjson.dumps(obj, default=default).decode("utf-8")


def _shared_processors() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def build_formatter(format_type: str = "json") -> structlog.stdlib.ProcessorFormatter:
    """Build the formatter rendering stdlib records through structlog.

    Args:
        format_type: 'json' for one JSON object per line, anything else for console text
    """
    if format_type == "json":
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(serializer=_orjson_dumps),
        ]
    else:
        processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=processors,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
) -> None:
    """Configure application-wide logging on stdout.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ('json' or 'text')
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(format_type))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
