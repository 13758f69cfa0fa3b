import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.app.services.cache import CacheEntry, ICache
from src.app.services.clock import Clock
from .memory_cache import MemoryCache

logger = logging.getLogger(__name__)


class RedisCache(ICache):
    """
    Redis-backed cache with an in-process fallback.

    The first connection error disables the Redis client for the rest of
    the process; from then on every call is served by the fallback.
    """

    def __init__(self, client, clock: Clock, fallback: MemoryCache, default_ttl: int = 900):
        self.client = client
        self.clock = clock
        self.fallback = fallback
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, clock: Clock, default_ttl: int = 900) -> "RedisCache":
        client = redis.from_url(url, decode_responses=True)
        return cls(client, clock, MemoryCache(clock, default_ttl), default_ttl)

    @property
    def remote_enabled(self) -> bool:
        return self.client is not None

    def _disable_remote(self, error: Exception) -> None:
        logger.warning(f"Redis unavailable, using memory cache only: {error}")
        self.client = None

    async def get(self, key: str) -> Optional[Any]:
        if self.client is None:
            return await self.fallback.get(key)
        try:
            raw = await self.client.get(key)
            if raw is None:
                return None
            entry = CacheEntry.model_validate_json(raw)
            if not entry.is_live(self.clock.timestamp()):
                await self.client.delete(key)
                return None
            return entry.data
        except (RedisConnectionError, RedisTimeoutError) as e:
            self._disable_remote(e)
            return await self.fallback.get(key)
        except Exception as e:
            logger.error(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        ttl = ttl or self.default_ttl
        if self.client is None:
            await self.fallback.set(key, data, ttl)
            return
        try:
            entry = CacheEntry(data=data, timestamp=self.clock.timestamp(), ttl=ttl)
            await self.client.set(key, entry.model_dump_json(), ex=ttl)
        except (RedisConnectionError, RedisTimeoutError) as e:
            self._disable_remote(e)
            await self.fallback.set(key, data, ttl)
        except Exception as e:
            logger.error(f"Cache set error for {key}: {e}")

    async def delete(self, key: str) -> None:
        await self.fallback.delete(key)
        if self.client is None:
            return
        try:
            await self.client.delete(key)
        except (RedisConnectionError, RedisTimeoutError) as e:
            self._disable_remote(e)
        except Exception as e:
            logger.error(f"Cache delete error for {key}: {e}")

    async def clear(self, pattern: Optional[str] = None) -> None:
        await self.fallback.clear(pattern)
        if self.client is None:
            return
        try:
            if pattern is None:
                await self.client.flushdb()
            else:
                async for key in self.client.scan_iter(match=pattern):
                    await self.client.delete(key)
        except (RedisConnectionError, RedisTimeoutError) as e:
            self._disable_remote(e)
        except Exception as e:
            logger.error(f"Cache clear error: {e}")

    def stats(self) -> Dict[str, Any]:
        return {
            "backend": "redis",
            "remote_connected": self.remote_enabled,
            "memory_entries": len(self.fallback),
        }
