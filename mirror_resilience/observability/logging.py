"""Structured logging configuration for the resilience layer.

Logs are rendered as JSON in production for log aggregators and as
colored console output in development.

Configuration:
    Set via environment variables:
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - LOG_FORMAT: json, console (default: json in production, console in dev)
    - ENVIRONMENT: development, production (affects format default)

Usage:
    >>> from mirror_resilience.observability.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("cache_error", key="ctx:user:42", error="timeout")

Standard Events:
    Circuit breaker:
        - circuit_breaker_opened: Failure threshold reached
        - circuit_breaker_reopened: Half-open probe failed
        - circuit_breaker_closed: Dependency recovered

    Cache:
        - cache_error: Cache operation failed (warning, absorbed)
        - circuit_open_skip: Breaker open, backend not called (debug)

    Rate limiting:
        - rate_limited: Request denied with 429
        - rate_limiter_error: Limiter call failed (error, request denied)
        - rate_limiter_disabled: No Redis configured, pass-through mode
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.types import Processor

_COMMON_PROCESSORS: tuple[Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
)


def _resolve_options(
    level: str | None, log_format: str | None, is_production: bool | None
) -> tuple[str, str]:
    if is_production is None:
        is_production = os.getenv("ENVIRONMENT", "development").lower() == "production"
    return (
        (level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        log_format or os.getenv("LOG_FORMAT") or ("json" if is_production else "console"),
    )


def build_processors(log_format: str) -> list[Processor]:
    """Processor chain for a log format.

    ``json`` renders one object per line with exceptions formatted inline;
    anything else renders colored console output.
    """
    if log_format == "json":
        return [
            *_COMMON_PROCESSORS,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [*_COMMON_PROCESSORS, structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
    is_production: bool | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Explicit calls always apply, so ``serve --log-level debug`` takes effect
    even after modules have created their loggers.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (LOG_LEVEL env by default)
        log_format: json or console (LOG_FORMAT env, else by environment)
        is_production: Production detection override (ENVIRONMENT env by default)
    """
    level, log_format = _resolve_options(level, log_format, is_production)
    numeric_level = getattr(logging, level, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)
    logging.getLogger().setLevel(numeric_level)

    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger, configuring from the environment on first use."""
    if not structlog.is_configured():
        configure_logging()

    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log calls in this context.

    Example:
        >>> bind_context(request_id="abc123", client_ip="203.0.113.5")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


class LogEvents:
    """Standard event names for structured logging.

    Example:
        >>> logger.warning(LogEvents.CACHE_ERROR, key="ctx:user:42")
    """

    # Circuit breaker events
    CIRCUIT_BREAKER_OPENED = "circuit_breaker_opened"
    CIRCUIT_BREAKER_REOPENED = "circuit_breaker_reopened"
    CIRCUIT_BREAKER_CLOSED = "circuit_breaker_closed"
    CIRCUIT_BREAKER_RESET = "circuit_breaker_reset"
    CIRCUIT_OPEN_SKIP = "circuit_open_skip"

    # Cache events
    CACHE_ERROR = "cache_error"
    CACHE_INITIALIZED = "cache_initialized"
    CACHE_DISABLED = "cache_disabled"

    # Rate limiting events
    RATE_LIMITED = "rate_limited"
    RATE_LIMITER_ERROR = "rate_limiter_error"
    RATE_LIMITER_DISABLED = "rate_limiter_disabled"

    # API events
    REQUEST_RECEIVED = "request_received"
    REQUEST_COMPLETED = "request_completed"

    # Lifecycle events
    SERVER_STARTED = "server_started"
    SERVER_SHUTDOWN = "server_shutdown"
