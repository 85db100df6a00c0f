"""Fail-closed rate limiter guarded by a circuit breaker.

The opposite safety direction from the cache: when the limiter backend is
failing, requests are DENIED rather than silently let through. A limiter
with no backend at all is a deliberate pass-through mode (protection
disabled by configuration), which is not a failure.
"""

from dataclasses import dataclass

from redis.asyncio import Redis

from mirror_resilience.core.config import Settings
from mirror_resilience.observability.logging import LogEvents, get_logger
from mirror_resilience.ratelimit.backend import LimiterBackend, SlidingWindowLimiter
from mirror_resilience.ratelimit.models import RateLimitResult
from mirror_resilience.resilience.circuit_breaker import CircuitBreaker, CircuitStatus
from mirror_resilience.resilience.client import CircuitBreakerClient, FailurePolicy

logger = get_logger(__name__)


class RateLimiter:
    """Checks per-identifier limits through a guarded backend.

    Example:
        >>> limiter = RateLimiter(SlidingWindowLimiter(redis, limit=5, prefix="rl:auth"))
        >>> result = await limiter.check_limit("203.0.113.5")
        >>> if not result.success:
        ...     return too_many_requests(result)
    """

    def __init__(
        self,
        backend: LimiterBackend | None,
        breaker: CircuitBreaker | None = None,
        name: str = "rate_limiter",
    ):
        """Initialize rate limiter.

        Args:
            backend: Limiter primitive, or None for pass-through mode
            breaker: Breaker tracking backend health (a fresh one if None)
            name: Limiter name for log events
        """
        self.name = name
        self._client: CircuitBreakerClient[LimiterBackend] = CircuitBreakerClient(
            backend=backend,
            breaker=breaker or CircuitBreaker(name="rate_limiter"),
            policy=FailurePolicy.FAIL_CLOSED,
            service="rate_limiter",
        )

    @property
    def backend(self) -> LimiterBackend | None:
        return self._client.backend

    @property
    def breaker(self) -> CircuitBreaker:
        return self._client.breaker

    async def check_limit(self, identifier: str) -> RateLimitResult:
        """Check whether ``identifier`` may make another request.

        Returns:
            - ``success=True`` with no remaining/reset when no backend is set
            - the backend's decision verbatim when it answers
            - ``success=False, circuit_open=True`` when the backend raises or
              its circuit is open

        While the circuit is open the backend is not consulted, so after
        Redis recovers requests keep being denied for up to the breaker's
        ``recovery_timeout`` until the next probe succeeds.
        """

        async def _limit(backend: LimiterBackend) -> RateLimitResult:
            response = await backend.limit(identifier)
            return RateLimitResult(
                success=response.success,
                remaining=response.remaining,
                reset=response.reset,
            )

        return await self._client.call(
            "limit",
            _limit,
            unconfigured=RateLimitResult(success=True),
            denied=RateLimitResult(success=False, circuit_open=True),
            error_event=LogEvents.RATE_LIMITER_ERROR,
            identifier=identifier,
            limiter=self.name,
        )

    def circuit_status(self) -> CircuitStatus:
        """Get rate limiter circuit breaker status (monitoring/testing)."""
        return self._client.circuit_status()

    def reset_circuit_breaker(self) -> None:
        """Reset rate limiter circuit breaker state."""
        self._client.reset_circuit_breaker()


async def check_rate_limit(
    limiter: RateLimiter | None, identifier: str
) -> RateLimitResult:
    """Check a limit, treating a missing limiter as rate limiting disabled."""
    if limiter is None:
        return RateLimitResult(success=True)
    return await limiter.check_limit(identifier)


@dataclass
class RateLimiters:
    """Rate limiting tiers sharing one Redis connection and one breaker.

    Attributes:
        auth: Brute-force protection for auth endpoints (per IP)
        ai: Cost protection for AI endpoints (per user)
        write: Spam protection for write endpoints (per user)
        global_: Abuse protection for every request (per IP)
        breaker: Breaker shared by the tiers (never the cache's)
    """

    auth: RateLimiter
    ai: RateLimiter
    write: RateLimiter
    global_: RateLimiter
    breaker: CircuitBreaker

    def circuit_status(self) -> CircuitStatus:
        return self.breaker.status()

    def reset_circuit_breaker(self) -> None:
        self.breaker.reset()


def create_rate_limiter(
    redis: "Redis[bytes] | None",
    limit: int,
    window_seconds: int,
    prefix: str,
    breaker: CircuitBreaker | None = None,
) -> RateLimiter:
    """Create a tier limiter, falling back to pass-through without Redis.

    Args:
        redis: Shared Redis client, or None when not configured
        limit: Requests allowed per window
        window_seconds: Window size in seconds
        prefix: Redis key prefix (e.g. ``rl:auth``)
        breaker: Breaker to share across tiers

    Returns:
        RateLimiter with a sliding window backend, or a pass-through limiter
    """
    if redis is None:
        logger.warning(LogEvents.RATE_LIMITER_DISABLED, prefix=prefix)
        return RateLimiter(None, breaker=breaker, name=prefix)

    backend = SlidingWindowLimiter(
        redis,
        limit=limit,
        window_seconds=window_seconds,
        prefix=prefix,
    )
    return RateLimiter(backend, breaker=breaker, name=prefix)


def build_rate_limiters(redis: "Redis[bytes] | None", config: Settings) -> RateLimiters:
    """Build all rate limiting tiers from settings."""
    breaker = CircuitBreaker(
        failure_threshold=config.rate_limit_circuit_failure_threshold,
        recovery_timeout=config.rate_limit_circuit_recovery_timeout,
        name="rate_limiter",
    )
    client = redis if config.rate_limit_enabled else None
    window = config.rate_limit_window_seconds

    return RateLimiters(
        auth=create_rate_limiter(client, config.rate_limit_auth, window, "rl:auth", breaker),
        ai=create_rate_limiter(client, config.rate_limit_ai, window, "rl:ai", breaker),
        write=create_rate_limiter(client, config.rate_limit_write, window, "rl:write", breaker),
        global_=create_rate_limiter(
            client, config.rate_limit_global, window, "rl:global", breaker
        ),
        breaker=breaker,
    )
