"""Unit tests for CacheService (memory backend + mocked redis client)."""

import time
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.ff_common.cache import CacheService


@pytest.fixture
def cache() -> CacheService:
    return CacheService()


class TestMemoryBackend:
    async def test_get_missing_returns_none(self, cache: CacheService) -> None:
        assert await cache.get("nope") is None

    async def test_set_then_get_round_trips_json(self, cache: CacheService) -> None:
        assert await cache.set("k", {"a": [1, "2"]}) is True
        assert await cache.get("k") == {"a": [1, "2"]}

    async def test_delete_removes_key(self, cache: CacheService) -> None:
        await cache.set("k", "v")
        assert await cache.delete("k") is True
        assert await cache.get("k") is None

    async def test_flush_clears_everything(self, cache: CacheService) -> None:
        await cache.set("a", 1)
        await cache.set("b", 2)
        assert await cache.flush() is True
        assert await cache.get("a") is None
        assert await cache.get("b") is None

    async def test_ttl_expires_lazily(self, cache: CacheService) -> None:
        await cache.set("k", "v", ttl_seconds=10)
        assert await cache.get("k") == "v"

        cache._mem["k"].expires_at = time.monotonic() - 1
        assert await cache.get("k") is None
        assert "k" not in cache._mem

    async def test_no_ttl_never_expires(self, cache: CacheService) -> None:
        await cache.set("k", "v")
        assert cache._mem["k"].expires_at is None

    async def test_unserializable_value_is_not_stored(self, cache: CacheService) -> None:
        assert await cache.set("k", object()) is False
        assert await cache.get("k") is None

    async def test_backend_name(self, cache: CacheService) -> None:
        assert cache.backend == "memory"
        assert await cache.ping() is True


class TestRedisBackend:
    async def test_set_passes_ttl_as_ex(self) -> None:
        client = AsyncMock()
        cache = CacheService(client)

        assert await cache.set("k", [1], ttl_seconds=300) is True
        client.set.assert_awaited_once_with("k", "[1]", ex=300)

    async def test_get_decodes_json(self) -> None:
        client = AsyncMock()
        client.get.return_value = '{"x": 1}'
        assert await CacheService(client).get("k") == {"x": 1}

    async def test_errors_degrade_to_miss_and_false(self) -> None:
        client = AsyncMock()
        err = RedisConnectionError("down")
        client.get.side_effect = err
        client.set.side_effect = err
        client.delete.side_effect = err
        client.flushdb.side_effect = err
        client.ping.side_effect = err
        cache = CacheService(client)

        assert await cache.get("k") is None
        assert await cache.set("k", 1) is False
        assert await cache.delete("k") is False
        assert await cache.flush() is False
        assert await cache.ping() is False

    async def test_corrupt_payload_is_a_miss(self) -> None:
        client = AsyncMock()
        client.get.return_value = "{not json"
        assert await CacheService(client).get("k") is None
