"""Core configuration and exceptions."""

from mirror_resilience.core.config import Settings, settings
from mirror_resilience.core.exceptions import (
    CacheInvalidationError,
    ConfigurationError,
    MirrorError,
)

__all__ = [
    "Settings",
    "settings",
    "MirrorError",
    "ConfigurationError",
    "CacheInvalidationError",
]
