"""Shared Redis client construction."""

from redis.asyncio import Redis

from mirror_resilience.core.config import Settings
from mirror_resilience.observability.logging import get_logger

logger = get_logger(__name__)


def create_redis(config: Settings) -> "Redis[bytes] | None":
    """Create the process-wide Redis client.

    Args:
        config: Application settings

    Returns:
        Redis client, or None when no Redis URL is configured

    Note:
        Connection is lazy; an unreachable server surfaces as errors on the
        first command, which the guarded clients handle.
    """
    if not config.redis_configured:
        logger.warning("redis_not_configured")
        return None

    client: Redis[bytes] = Redis.from_url(
        config.redis_url,
        socket_timeout=config.redis_timeout,
        socket_connect_timeout=config.redis_timeout,
        retry_on_timeout=False,
        max_connections=20,
        decode_responses=False,  # values are msgpack bytes
    )
    return client
