from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Cached value with its write time (epoch seconds) and TTL (seconds)"""

    data: Any
    timestamp: float
    ttl: int

    def is_live(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


class ICache(ABC):
    """
    Expiring key-value cache.

    Implementations never raise to callers: failures are logged and
    treated as misses (get) or no-ops (set, delete, clear).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        pass

    @abstractmethod
    async def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    @abstractmethod
    async def clear(self, pattern: Optional[str] = None) -> None:
        """Remove keys matching a glob pattern, or every key when None"""
        pass

    @abstractmethod
    def stats(self) -> Dict[str, Any]:
        pass
