"""Exception hierarchy for the resilience layer.

Remote-call failures (connection refused, timeout, serialization) are not
wrapped: clients catch them and apply their failure policy. These types
cover errors raised by the layer itself.
"""

from typing import Any


class MirrorError(Exception):
    """Base exception for all resilience layer errors."""

    code: str = "MIRROR_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(MirrorError):
    """Configuration error (invalid limits, windows, thresholds)."""

    code: str = "CONFIGURATION_ERROR"


class CacheInvalidationError(MirrorError):
    """One or more keys of a multi-key invalidation failed."""

    code: str = "CACHE_INVALIDATION_FAILED"

    def __init__(self, failed_keys: list[str], errors: list[BaseException]):
        super().__init__(
            f"Failed to delete {len(failed_keys)} cache key(s)",
            details={
                "failed_keys": failed_keys,
                "errors": [str(e) for e in errors],
            },
        )
        self.failed_keys = failed_keys
        self.errors = errors
