"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from mirror_resilience.cache import CacheClient
from mirror_resilience.ratelimit import LimitResponse, RateLimiter
from mirror_resilience.resilience import CircuitBreaker


class FakeClock:
    """Manually advanced monotonic clock for breaker timing tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def breaker(clock) -> CircuitBreaker:
    """Breaker with default threshold (3) and recovery timeout (15s)."""
    return CircuitBreaker(name="test", clock=clock)


@pytest.fixture
def mock_store() -> MagicMock:
    """Key-value store whose methods are AsyncMocks."""
    store = MagicMock()
    store.get = AsyncMock(return_value=None)
    store.set = AsyncMock(return_value=True)
    store.delete = AsyncMock(return_value=1)
    return store


@pytest.fixture
def cache(mock_store, breaker) -> CacheClient:
    return CacheClient(mock_store, breaker=breaker)


@pytest.fixture
def mock_backend() -> MagicMock:
    """Limiter backend allowing requests with 4 remaining."""
    backend = MagicMock()
    backend.limit = AsyncMock(
        return_value=LimitResponse(success=True, limit=5, remaining=4, reset=1_700_000_060_000)
    )
    return backend


@pytest.fixture
def rate_limiter(mock_backend, clock) -> RateLimiter:
    return RateLimiter(
        mock_backend, breaker=CircuitBreaker(name="rate_limiter", clock=clock), name="rl:test"
    )
