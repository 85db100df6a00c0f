"""Fail-open caching layer for derived user context.

The cache reduces database load for user context, dreams, patterns,
sessions and reflections. It is guarded by its own circuit breaker and
never raises: on a miss, an open circuit or a Redis error, callers get None
and read from the database of record.

Usage:
    >>> from mirror_resilience.cache import CacheClient, CacheTTL, RedisStore, cache_keys
    >>>
    >>> cache = CacheClient(RedisStore(redis))
    >>> key = cache_keys.user_context(user_id)
    >>> context = await cache.get(key)
    >>> if context is None:
    >>>     context = await db.load_user_context(user_id)
    >>>     await cache.set(key, context, ttl=CacheTTL.USER_CONTEXT)
"""

from mirror_resilience.cache.models import CACHE_TTL, CacheKeys, CacheTTL, cache_keys
from mirror_resilience.cache.service import CacheClient
from mirror_resilience.cache.store import KeyValueStore, RedisStore

__all__ = [
    "CacheClient",
    "CacheKeys",
    "CacheTTL",
    "CACHE_TTL",
    "cache_keys",
    "KeyValueStore",
    "RedisStore",
]
