"""Circuit breaker primitive and guarded client shared by cache and rate limiting."""

from mirror_resilience.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    CircuitStatus,
)
from mirror_resilience.resilience.client import CircuitBreakerClient, FailurePolicy

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CircuitStatus",
    "CircuitBreakerClient",
    "FailurePolicy",
]
