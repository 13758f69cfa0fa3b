"""
Unit tests for the memory cache, the Redis cache fallback and MFA codes
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.adapter.services.memory_cache import PRUNE_THRESHOLD, MemoryCache
from src.adapter.services.redis_cache import RedisCache
from src.app.services.cache import CacheEntry
from src.app.services.mfa_token_cache import MFATokenCache


class UnreachableRedis:
    def __init__(self):
        self.calls = 0

    async def get(self, key):
        self.calls += 1
        raise RedisConnectionError("connection refused")

    async def set(self, key, value, ex=None):
        self.calls += 1
        raise RedisConnectionError("connection refused")

    async def delete(self, key):
        self.calls += 1
        raise RedisConnectionError("connection refused")


class DictRedis:
    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)

    async def flushdb(self):
        self.data.clear()


@pytest.mark.asyncio
async def test_memory_cache_entry_expires_after_ttl(cache, clock):
    await cache.set("report", {"total": 3}, ttl=1)

    assert await cache.get("report") == {"total": 3}

    clock.advance(seconds=1)
    assert await cache.get("report") is None
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memory_cache_default_ttl(cache, clock):
    await cache.set("stats", [1, 2])

    clock.advance(seconds=899)
    assert await cache.get("stats") == [1, 2]
    clock.advance(seconds=1)
    assert await cache.get("stats") is None


@pytest.mark.asyncio
async def test_memory_cache_clear_by_pattern(cache):
    await cache.set("mfa:sms:1", "123456")
    await cache.set("mfa:sms:2", "654321")
    await cache.set("report:weekly", {})

    await cache.clear("mfa:*")

    assert await cache.get("mfa:sms:1") is None
    assert await cache.get("report:weekly") == {}

    await cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_memory_cache_prunes_expired_entries_past_threshold(cache, clock):
    for i in range(PRUNE_THRESHOLD):
        await cache.set(f"old:{i}", i, ttl=1)
    clock.advance(seconds=2)

    assert len(cache) == PRUNE_THRESHOLD

    # This write crosses the threshold and sweeps every expired entry
    await cache.set("fresh", "value")

    assert len(cache) == 1
    assert await cache.get("fresh") == "value"


@pytest.mark.asyncio
async def test_redis_cache_round_trip(clock):
    client = DictRedis()
    redis_cache = RedisCache(client, clock, MemoryCache(clock), default_ttl=900)

    await redis_cache.set("key", {"a": 1}, ttl=10)

    assert CacheEntry.model_validate_json(client.data["key"]).ttl == 10
    assert await redis_cache.get("key") == {"a": 1}
    clock.advance(seconds=10)
    assert await redis_cache.get("key") is None
    assert "key" not in client.data


@pytest.mark.asyncio
async def test_redis_cache_falls_back_to_memory_when_unreachable(clock):
    client = UnreachableRedis()
    redis_cache = RedisCache(client, clock, MemoryCache(clock), default_ttl=900)

    await redis_cache.set("key", "value")

    assert redis_cache.remote_enabled is False
    assert await redis_cache.get("key") == "value"
    assert client.calls == 1
    assert redis_cache.stats() == {
        "backend": "redis",
        "remote_connected": False,
        "memory_entries": 1,
    }


@pytest.mark.asyncio
async def test_mfa_code_is_single_use(cache):
    tokens = MFATokenCache(cache, ttl=300)
    await tokens.store_code("device-1", "123456")

    assert await tokens.verify_code("device-1", "000000") is False
    assert await tokens.verify_code("device-1", "123456") is True
    assert await tokens.verify_code("device-1", "123456") is False


@pytest.mark.asyncio
async def test_mfa_code_expires(cache, clock):
    tokens = MFATokenCache(cache, ttl=300)
    await tokens.store_code("device-1", "123456")

    clock.advance(seconds=300)

    assert await tokens.verify_code("device-1", "123456") is False


@pytest.mark.asyncio
async def test_mfa_code_rejects_non_ascii_digits(cache):
    tokens = MFATokenCache(cache, ttl=300)
    await tokens.store_code("device-1", "123456")

    assert await tokens.verify_code("device-1", "١٢٣٤٥٦") is False
    assert await tokens.verify_code("device-1", "123456") is True
