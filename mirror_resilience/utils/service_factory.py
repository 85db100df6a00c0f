"""Factory for the process-wide resilience services."""

from dataclasses import dataclass

from redis.asyncio import Redis

from mirror_resilience.cache.service import CacheClient
from mirror_resilience.cache.store import RedisStore
from mirror_resilience.core.config import Settings, settings
from mirror_resilience.core.redis_client import create_redis
from mirror_resilience.observability.logging import LogEvents, get_logger
from mirror_resilience.ratelimit.limiter import RateLimiters, build_rate_limiters

logger = get_logger(__name__)


@dataclass
class ResilienceServices:
    """Cache and rate limiters built once per process.

    The cache and the rate limiters each own their circuit breaker, so a
    cache outage never changes rate limiting decisions and vice versa.
    """

    redis: "Redis[bytes] | None"
    cache: CacheClient
    rate_limiters: RateLimiters

    async def close(self) -> None:
        """Close the shared Redis connection pool."""
        if self.redis is not None:
            await self.redis.aclose()
            logger.info("redis_closed")


def create_services(
    config: Settings | None = None,
    redis: "Redis[bytes] | None" = None,
) -> ResilienceServices:
    """Create cache and rate limiters with all dependencies.

    Args:
        config: Settings to use (defaults to the module settings)
        redis: Existing Redis client (created from settings if None)

    Returns:
        Configured ResilienceServices instance
    """
    config = config or settings
    if redis is None:
        redis = create_redis(config)

    store = RedisStore(redis) if redis is not None else None
    cache = CacheClient.from_settings(store, config)
    if cache.store is None:
        logger.warning(LogEvents.CACHE_DISABLED, redis_configured=redis is not None)
    else:
        logger.info(LogEvents.CACHE_INITIALIZED, prefix=config.cache_key_prefix)

    return ResilienceServices(
        redis=redis,
        cache=cache,
        rate_limiters=build_rate_limiters(redis, config),
    )
