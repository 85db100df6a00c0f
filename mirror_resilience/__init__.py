"""Mirror Resilience - circuit-breaker-guarded caching and rate limiting.

One breaker primitive, two opposite failure policies:
    - the cache fails OPEN: a Redis outage only costs performance
    - the rate limiter fails CLOSED: a Redis outage denies requests

Basic usage:
    >>> from mirror_resilience import CacheClient, RateLimiter, RedisStore, cache_keys
    >>> cache = CacheClient(RedisStore(redis))
    >>> context = await cache.get(cache_keys.user_context(user_id))
"""

from dotenv import load_dotenv

load_dotenv()

from mirror_resilience.cache import (  # noqa: E402
    CACHE_TTL,
    CacheClient,
    CacheKeys,
    CacheTTL,
    KeyValueStore,
    RedisStore,
    cache_keys,
)
from mirror_resilience.core import (  # noqa: E402
    CacheInvalidationError,
    ConfigurationError,
    MirrorError,
    Settings,
    settings,
)
from mirror_resilience.ratelimit import (  # noqa: E402
    LimiterBackend,
    RateLimiter,
    RateLimitResult,
    check_rate_limit,
    with_rate_limit,
)
from mirror_resilience.resilience import (  # noqa: E402
    CircuitBreaker,
    CircuitBreakerClient,
    CircuitState,
    CircuitStatus,
    FailurePolicy,
)

__version__ = "0.1.0"

__all__ = [
    "CacheClient",
    "CacheKeys",
    "CacheTTL",
    "CACHE_TTL",
    "cache_keys",
    "KeyValueStore",
    "RedisStore",
    "RateLimiter",
    "RateLimitResult",
    "LimiterBackend",
    "check_rate_limit",
    "with_rate_limit",
    "CircuitBreaker",
    "CircuitBreakerClient",
    "CircuitState",
    "CircuitStatus",
    "FailurePolicy",
    "MirrorError",
    "ConfigurationError",
    "CacheInvalidationError",
    "Settings",
    "settings",
]
