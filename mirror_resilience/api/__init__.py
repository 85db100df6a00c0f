"""FastAPI application exposing health and circuit breaker status."""

from mirror_resilience.api.app import create_app
from mirror_resilience.api.validation import (
    CircuitsResponse,
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    "create_app",
    "CircuitsResponse",
    "ErrorResponse",
    "HealthResponse",
]
