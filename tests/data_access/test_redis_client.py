"""
Unit tests for CacheRepository.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError

from popcorn_api.data_access.redis_client import CacheRepository


class TestCacheRepository:
    @pytest.mark.asyncio
    async def test_get_returns_none_for_missing_key(self, cache):
        assert await cache.get("missing") is None

    @pytest.mark.asyncio
    async def test_set_then_get_returns_identical_payload(self, cache):
        payload = '{"total_movies":0,"movies":[]}'
        assert await cache.set("key", payload, ttl_seconds=86400) is True
        assert await cache.get("key") == payload

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, cache, clock):
        await cache.set("key", "payload", ttl_seconds=86400)

        clock.advance(86399)
        assert await cache.get("key") == "payload"

        clock.advance(1)
        assert await cache.get("key") is None

    @pytest.mark.asyncio
    async def test_ttl_is_passed_to_redis(self):
        client = AsyncMock()
        await CacheRepository(client).set("key", "payload", ttl_seconds=86400)
        client.set.assert_awaited_once_with("key", "payload", ex=86400)

    @pytest.mark.asyncio
    async def test_bytes_are_decoded(self):
        client = AsyncMock()
        client.get.return_value = b'{"a":1}'
        assert await CacheRepository(client).get("key") == '{"a":1}'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [RedisError("boom"), RedisTimeoutError("slow"), RuntimeError("odd")])
    async def test_failures_degrade_to_miss_and_skip(self, error):
        client = AsyncMock()
        client.get.side_effect = error
        client.set.side_effect = error
        repository = CacheRepository(client)

        assert await repository.get("key") is None
        assert await repository.set("key", "payload", ttl_seconds=60) is False

    @pytest.mark.asyncio
    async def test_missing_client_is_bypassed(self):
        repository = CacheRepository(None)
        assert await repository.get("key") is None
        assert await repository.set("key", "payload", ttl_seconds=60) is False
