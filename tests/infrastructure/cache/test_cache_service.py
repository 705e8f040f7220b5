"""Tests for Redis cache service"""

import json
from unittest.mock import AsyncMock, patch

import pytest
import redis.asyncio as redis

from backoffice.infrastructure.cache.redis_cache import CacheService


@pytest.fixture
async def cache_service():
    """Create cache service with mock Redis client"""
    service = CacheService()
    # Mock Redis client
    service.redis = AsyncMock()
    service._connected = True
    return service


@pytest.fixture
async def disconnected_cache():
    """Create disconnected cache service"""
    service = CacheService()
    service.redis = None
    service._connected = False
    return service


def enabled_cache() -> CacheService:
    cache = CacheService()
    cache.settings = cache.settings.model_copy(update={"redis_enabled": True})
    return cache


@pytest.mark.asyncio
async def test_cache_get_hit(cache_service):
    """Test cache get when key exists"""
    cache_service.redis.get = AsyncMock(
        return_value='[{"id": "p1", "permission_code": "customer.read"}]'
    )

    result = await cache_service.get("permissions:user-1")

    assert result == [{"id": "p1", "permission_code": "customer.read"}]
    cache_service.redis.get.assert_called_once_with("permissions:user-1")


@pytest.mark.asyncio
async def test_cache_get_miss(cache_service):
    """Test cache get when key doesn't exist"""
    cache_service.redis.get = AsyncMock(return_value=None)

    result = await cache_service.get("missing_key")

    assert result is None
    cache_service.redis.get.assert_called_once_with("missing_key")


@pytest.mark.asyncio
async def test_cache_get_corrupt_value_is_a_miss(cache_service):
    cache_service.redis.get = AsyncMock(return_value="{not json")

    assert await cache_service.get("permissions:user-1") is None


@pytest.mark.asyncio
async def test_cache_set_success(cache_service):
    """Test successful cache set"""
    cache_service.redis.setex = AsyncMock()

    data = [{"id": "p1", "permission_code": "role.read", "route_path": None}]
    result = await cache_service.set("permissions:user-456", data, ttl=300)

    assert result is True
    cache_service.redis.setex.assert_called_once()

    call_args = cache_service.redis.setex.call_args
    assert call_args[0][0] == "permissions:user-456"
    assert call_args[0][1] == 300
    assert json.loads(call_args[0][2]) == data


@pytest.mark.asyncio
async def test_cache_set_unserialisable_value_returns_false(cache_service):
    cache_service.redis.setex = AsyncMock()

    assert await cache_service.set("key", {"value": object()}) is False
    cache_service.redis.setex.assert_not_called()


@pytest.mark.asyncio
async def test_cache_delete_success(cache_service):
    """Test successful cache delete"""
    cache_service.redis.delete = AsyncMock()

    result = await cache_service.delete("permissions:user-1")

    assert result is True
    cache_service.redis.delete.assert_called_once_with("permissions:user-1")


@pytest.mark.asyncio
async def test_cache_delete_pattern(cache_service):
    """Test delete pattern (wildcard deletion)"""

    async def mock_scan_iter(match=None):
        for key in ["permissions:user-1", "permissions:user-2", "permissions:user-3"]:
            yield key

    cache_service.redis.scan_iter = mock_scan_iter
    cache_service.redis.delete = AsyncMock()

    deleted_count = await cache_service.delete_pattern("permissions:*")

    assert deleted_count == 3
    assert cache_service.redis.delete.call_count == 3


@pytest.mark.asyncio
async def test_cache_unavailable_is_a_no_op(disconnected_cache):
    assert await disconnected_cache.get("any_key") is None
    assert await disconnected_cache.set("any_key", {"data": "value"}) is False
    assert await disconnected_cache.delete("any_key") is False
    assert await disconnected_cache.delete_pattern("permissions:*") == 0


@pytest.mark.asyncio
async def test_cache_is_available(cache_service, disconnected_cache):
    assert cache_service.is_available() is True
    assert disconnected_cache.is_available() is False


@pytest.mark.asyncio
async def test_cache_connect_skipped_when_disabled():
    with patch("redis.asyncio.Redis") as mock_redis_class:
        cache = CacheService()
        await cache.connect()

        mock_redis_class.assert_not_called()
        assert cache.is_available() is False


@pytest.mark.asyncio
async def test_cache_connect_success():
    """Test successful cache connection"""
    with patch("redis.asyncio.Redis") as mock_redis_class:
        mock_client = AsyncMock()
        mock_client.ping = AsyncMock()
        mock_redis_class.return_value = mock_client

        cache = enabled_cache()
        await cache.connect()

        assert cache.is_available() is True
        mock_client.ping.assert_called_once()


@pytest.mark.asyncio
async def test_cache_connect_failure():
    """Test cache connection failure"""
    with patch("redis.asyncio.Redis") as mock_redis_class:
        mock_client = AsyncMock()
        mock_client.ping = AsyncMock(side_effect=redis.ConnectionError("Connection refused"))
        mock_redis_class.return_value = mock_client

        cache = enabled_cache()
        await cache.connect()

        # Should gracefully handle failure
        assert cache.is_available() is False
        assert cache.redis is None


@pytest.mark.asyncio
async def test_cache_disconnect(cache_service):
    """Test cache disconnection"""
    client = cache_service.redis
    client.aclose = AsyncMock()

    await cache_service.disconnect()

    client.aclose.assert_called_once()
    assert cache_service.is_available() is False


@pytest.mark.asyncio
async def test_cache_redis_errors_degrade_to_miss(cache_service):
    cache_service.redis.get = AsyncMock(side_effect=redis.RedisError("Redis error"))
    cache_service.redis.setex = AsyncMock(side_effect=redis.RedisError("Redis error"))
    cache_service.redis.delete = AsyncMock(side_effect=redis.RedisError("Redis error"))

    assert await cache_service.get("key") is None
    assert await cache_service.set("key", {"data": "value"}) is False
    assert await cache_service.delete("key") is False


@pytest.mark.asyncio
async def test_cache_ttl_values(cache_service):
    """Test different TTL values"""
    cache_service.redis.setex = AsyncMock()

    await cache_service.set("key1", {"data": 1})
    assert cache_service.redis.setex.call_args[0][1] == 300

    await cache_service.set("key2", {"data": 2}, ttl=900)
    assert cache_service.redis.setex.call_args[0][1] == 900
