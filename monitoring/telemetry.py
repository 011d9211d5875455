"""Structured logging setup for the HTTP client SDK."""

from __future__ import annotations

import logging
import uuid
from typing import Any

import structlog

logger = structlog.get_logger(__name__)
audit_logger = structlog.get_logger("audit")


def generate_request_id() -> str:
    """Generate a short request identifier."""
    return uuid.uuid4().hex[:8]


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure structlog for JSON or console output."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            [structlog.processors.CallsiteParameter.MODULE]
        ),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(),
    )


def configure_logging_from_settings(settings) -> None:
    """Apply the log level and format carried by ``config.Settings``."""
    configure_logging(level=settings.log_level, fmt=settings.log_format)


def audit_log(event: str, **kwargs: Any) -> None:
    """Record an audit log event."""
    audit_logger.info(event, **kwargs)
