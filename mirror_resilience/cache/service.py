"""Fail-open user context cache guarded by a circuit breaker."""

import asyncio
from typing import Any

from mirror_resilience.cache.models import CacheKeys, CacheTTL, cache_keys
from mirror_resilience.cache.store import KeyValueStore
from mirror_resilience.core.config import Settings
from mirror_resilience.core.exceptions import CacheInvalidationError
from mirror_resilience.observability.logging import LogEvents
from mirror_resilience.resilience.circuit_breaker import CircuitBreaker, CircuitStatus
from mirror_resilience.resilience.client import CircuitBreakerClient, FailurePolicy


class CacheClient:
    """Redis-backed cache that never fails its caller.

    Features:
        - Circuit breaker skips the store entirely while Redis is failing
        - Every operation absorbs errors and returns a safe default
        - Namespaced keys and per-category TTLs

    Design Philosophy:
        The cache is an OPTIONAL optimization. Callers fall back to the
        database of record on None, so an outage only makes responses slower.
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        breaker: CircuitBreaker | None = None,
        keys: CacheKeys = cache_keys,
    ):
        """Initialize cache client.

        Args:
            store: Key-value store, or None to disable caching
            breaker: Breaker owned by this client (a fresh one if None)
            keys: Key generator used for user context invalidation
        """
        self.keys = keys
        self._client: CircuitBreakerClient[KeyValueStore] = CircuitBreakerClient(
            backend=store,
            breaker=breaker or CircuitBreaker(name="cache"),
            policy=FailurePolicy.FAIL_OPEN,
            service="cache",
        )

    @classmethod
    def from_settings(cls, store: KeyValueStore | None, config: Settings) -> "CacheClient":
        """Build a cache client with breaker parameters from settings."""
        breaker = CircuitBreaker(
            failure_threshold=config.cache_circuit_failure_threshold,
            recovery_timeout=config.cache_circuit_recovery_timeout,
            name="cache",
        )
        return cls(
            store if config.cache_enabled else None,
            breaker=breaker,
            keys=CacheKeys(prefix=config.cache_key_prefix),
        )

    @property
    def store(self) -> KeyValueStore | None:
        return self._client.backend

    @property
    def breaker(self) -> CircuitBreaker:
        return self._client.breaker

    async def get(self, key: str) -> Any | None:
        """Retrieve a cached value.

        Returns:
            Cached value on hit; None on miss, open circuit, or any error
        """
        return await self._client.call(
            "get",
            lambda store: store.get(key),
            unconfigured=None,
            denied=None,
            error_event=LogEvents.CACHE_ERROR,
            key=key,
        )

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value. Best-effort; failures are logged, never raised.

        Args:
            key: Cache key
            value: msgpack-serializable value
            ttl: Seconds to live (defaults to ``CacheTTL.USER_CONTEXT``)
        """
        async def _set(store: KeyValueStore) -> None:
            expire = int(ttl) if ttl is not None else int(CacheTTL.USER_CONTEXT)
            await store.set(key, value, ex=expire)

        await self._client.call(
            "set",
            _set,
            unconfigured=None,
            denied=None,
            error_event=LogEvents.CACHE_ERROR,
            key=key,
        )

    async def delete(self, key: str) -> None:
        """Invalidate a key. Deleting a missing key counts as success."""

        async def _delete(store: KeyValueStore) -> None:
            await store.delete(key)

        await self._client.call(
            "delete",
            _delete,
            unconfigured=None,
            denied=None,
            error_event=LogEvents.CACHE_ERROR,
            key=key,
        )

    async def delete_user_context(self, user_id: str) -> None:
        """Invalidate every cached context category for a user.

        All deletions are attempted even when some fail, and even while the
        circuit is open. The combined outcome is recorded once: one breaker
        failure and one warning listing the failed keys, or one success.
        """
        keys = self.keys.all_for_user(user_id)

        async def _delete_one(store: KeyValueStore, key: str) -> int:
            return await store.delete(key)

        async def _delete_all(store: KeyValueStore) -> None:
            results = await asyncio.gather(
                *(_delete_one(store, key) for key in keys), return_exceptions=True
            )
            failed = [
                (key, result)
                for key, result in zip(keys, results)
                if isinstance(result, Exception)
            ]
            if failed:
                raise CacheInvalidationError(
                    failed_keys=[key for key, _ in failed],
                    errors=[error for _, error in failed],
                )

        await self._client.call(
            "delete_user_context",
            _delete_all,
            unconfigured=None,
            denied=None,
            error_event=LogEvents.CACHE_ERROR,
            respect_open=False,
            user_id=user_id,
        )

    def is_enabled(self) -> bool:
        """Check if a store is configured and the circuit is closed.

        Callers can use this to skip building cache keys and payloads when
        caching is known to be unavailable.
        """
        return self._client.available()

    def circuit_status(self) -> CircuitStatus:
        """Get cache circuit breaker status (monitoring/testing)."""
        return self._client.circuit_status()

    def reset_circuit_breaker(self) -> None:
        """Reset cache circuit breaker state."""
        self._client.reset_circuit_breaker()
