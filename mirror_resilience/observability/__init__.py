"""Structured logging for the resilience layer."""

from mirror_resilience.observability.logging import (
    LogEvents,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogEvents",
]
