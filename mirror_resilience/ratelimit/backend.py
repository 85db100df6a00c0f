"""Limiter backends: the primitive that decides whether a caller is over limit.

``SlidingWindowLimiter`` is the default backend:

Algorithm:
    - Sliding window counter using sorted sets (ZSET), one key per identifier
    - Score = request timestamp; entries older than the window are pruned
    - Reset is reported in epoch milliseconds
"""

import time
import uuid
from typing import Protocol, runtime_checkable

from redis.asyncio import Redis

from mirror_resilience.core.exceptions import ConfigurationError
from mirror_resilience.ratelimit.models import LimitResponse


@runtime_checkable
class LimiterBackend(Protocol):
    """Remote limiter primitive consumed by ``RateLimiter``.

    May raise on transport failure.
    """

    async def limit(self, identifier: str) -> LimitResponse:
        """Count a request for ``identifier`` and decide whether it is allowed."""
        ...


class SlidingWindowLimiter:
    """Redis sorted-set sliding window limiter.

    Example:
        >>> limiter = SlidingWindowLimiter(redis, limit=5, window_seconds=60, prefix="rl:auth")
        >>> decision = await limiter.limit("203.0.113.5")
    """

    def __init__(
        self,
        redis: "Redis[bytes]",
        limit: int,
        window_seconds: int = 60,
        prefix: str = "rl",
    ):
        if limit < 1:
            raise ConfigurationError(
                f"Rate limit must be at least 1, got {limit}", {"prefix": prefix}
            )
        if window_seconds < 1:
            raise ConfigurationError(
                f"Window must be at least 1 second, got {window_seconds}",
                {"prefix": prefix},
            )
        self.redis = redis
        self.limit_per_window = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    async def limit(self, identifier: str) -> LimitResponse:
        """Check and count a request.

        Algorithm:
            1. Remove expired entries (older than window)
            2. Count requests in current window
            3. If under limit, add current request and allow
            4. If over limit, deny; reset is when the oldest entry expires
        """
        now = time.time()
        window_start = now - self.window_seconds
        key = f"{self.prefix}:{identifier}"

        pipe = self.redis.pipeline()
        pipe.zremrangebyscore(key, 0, window_start)
        pipe.zcount(key, window_start, now)
        results = await pipe.execute()
        current_count = int(results[1])

        if current_count < self.limit_per_window:
            await self.redis.zadd(key, {f"{now}:{uuid.uuid4().hex[:8]}": now})
            await self.redis.expire(key, self.window_seconds + 10)
            return LimitResponse(
                success=True,
                limit=self.limit_per_window,
                remaining=self.limit_per_window - current_count - 1,
                reset=int((now + self.window_seconds) * 1000),
            )

        oldest_entries = await self.redis.zrange(key, 0, 0, withscores=True)
        if oldest_entries:
            reset_at = float(oldest_entries[0][1]) + self.window_seconds
        else:
            reset_at = now + self.window_seconds

        return LimitResponse(
            success=False,
            limit=self.limit_per_window,
            remaining=0,
            reset=int(reset_at * 1000),
        )
