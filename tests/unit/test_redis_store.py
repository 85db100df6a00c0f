"""Unit tests for the msgpack Redis store and the service factory."""

from unittest.mock import AsyncMock, MagicMock

import msgpack
import pytest

from mirror_resilience.cache import KeyValueStore, RedisStore
from mirror_resilience.core.config import Settings
from mirror_resilience.utils.service_factory import create_services


@pytest.fixture
def mock_redis():
    redis = MagicMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    redis.aclose = AsyncMock()
    return redis


class TestRedisStore:
    """Tests for RedisStore."""

    def test_satisfies_protocol(self, mock_redis):
        assert isinstance(RedisStore(mock_redis), KeyValueStore)

    @pytest.mark.asyncio
    async def test_set_packs_value(self, mock_redis):
        """Test values are msgpack encoded with the TTL as ex."""
        store = RedisStore(mock_redis)

        await store.set("ctx:user:u1", {"tier": "premium"}, ex=300)

        key, data = mock_redis.set.call_args[0]
        assert key == "ctx:user:u1"
        assert msgpack.unpackb(data, raw=False) == {"tier": "premium"}
        assert mock_redis.set.call_args[1]["ex"] == 300

    @pytest.mark.asyncio
    async def test_get_unpacks_value(self, mock_redis):
        """Test stored bytes are decoded."""
        mock_redis.get.return_value = msgpack.packb({"dreams": [1, 2]}, use_bin_type=True)

        assert await RedisStore(mock_redis).get("ctx:dreams:u1") == {"dreams": [1, 2]}

    @pytest.mark.asyncio
    async def test_get_miss(self, mock_redis):
        """Test a missing key returns None."""
        assert await RedisStore(mock_redis).get("ctx:user:none") is None

    @pytest.mark.asyncio
    async def test_corrupt_payload_raises(self, mock_redis):
        """Test undecodable bytes surface as an error for the breaker."""
        mock_redis.get.return_value = b"\xc1"

        with pytest.raises(Exception):
            await RedisStore(mock_redis).get("ctx:user:u1")

    @pytest.mark.asyncio
    async def test_delete_returns_count(self, mock_redis):
        """Test delete reports removed keys."""
        mock_redis.delete.return_value = 0

        assert await RedisStore(mock_redis).delete("ctx:user:u1") == 0


class TestServiceFactory:
    """Tests for create_services."""

    def test_with_redis(self, mock_redis):
        """Test cache and limiters are wired to the shared client."""
        services = create_services(Settings(), redis=mock_redis)

        assert isinstance(services.cache.store, RedisStore)
        assert services.rate_limiters.auth.backend is not None
        assert services.cache.breaker is not services.rate_limiters.breaker

    def test_without_redis(self):
        """Test both clients degrade to their no-backend modes."""
        services = create_services(Settings(redis_url=""))

        assert services.redis is None
        assert services.cache.store is None
        assert services.rate_limiters.global_.backend is None

    @pytest.mark.asyncio
    async def test_close(self, mock_redis):
        """Test close releases the Redis pool."""
        services = create_services(Settings(), redis=mock_redis)

        await services.close()

        mock_redis.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cache_outage_does_not_affect_limiter(self, mock_redis):
        """Test the two breakers are independent."""
        services = create_services(Settings(), redis=mock_redis)
        mock_redis.get.side_effect = ConnectionError("down")

        for _ in range(3):
            await services.cache.get("ctx:user:u1")

        assert services.cache.circuit_status().is_open is True
        assert services.rate_limiters.circuit_status().is_open is False
