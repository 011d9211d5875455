"""Logging utilities."""

from .telemetry import (
    audit_log,
    configure_logging,
    configure_logging_from_settings,
    generate_request_id,
)

__all__ = [
    "audit_log",
    "configure_logging",
    "configure_logging_from_settings",
    "generate_request_id",
]
