"""Key-value store interface consumed by the cache, and its Redis adapter."""

from typing import Any, Protocol, runtime_checkable

import msgpack
from redis.asyncio import Redis


@runtime_checkable
class KeyValueStore(Protocol):
    """Remote key-value store used by ``CacheClient``.

    Any method may raise on transport or serialization failure.
    """

    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None on a miss."""
        ...

    async def set(self, key: str, value: Any, ex: int | None = None) -> Any:
        """Store a value with an optional TTL in seconds."""
        ...

    async def delete(self, key: str) -> int:
        """Delete a key, returning the number of keys removed."""
        ...


class RedisStore:
    """MessagePack-serializing ``KeyValueStore`` backed by Redis.

    Example:
        >>> store = RedisStore(Redis.from_url("redis://localhost:6379"))
        >>> await store.set("ctx:user:42", {"tier": "premium"}, ex=300)
        >>> await store.get("ctx:user:42")
        {'tier': 'premium'}
    """

    def __init__(self, redis: "Redis[bytes]"):
        self.redis = redis

    async def get(self, key: str) -> Any | None:
        data = await self.redis.get(key)
        if data is None:
            return None
        return msgpack.unpackb(data, raw=False)

    async def set(self, key: str, value: Any, ex: int | None = None) -> Any:
        data = msgpack.packb(value, use_bin_type=True)
        return await self.redis.set(key, data, ex=ex)

    async def delete(self, key: str) -> int:
        return int(await self.redis.delete(key))
