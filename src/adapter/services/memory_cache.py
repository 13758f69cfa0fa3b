import fnmatch
import logging
from typing import Any, Dict, Optional

from src.app.services.cache import CacheEntry, ICache
from src.app.services.clock import Clock

logger = logging.getLogger(__name__)

PRUNE_THRESHOLD = 1000


class MemoryCache(ICache):
    """
    In-process cache.

    Expiry is enforced at read time. Once a write pushes the entry count
    past PRUNE_THRESHOLD, every expired entry is deleted in one pass.
    """

    def __init__(self, clock: Clock, default_ttl: int = 900):
        self.clock = clock
        self.default_ttl = default_ttl
        self._store: Dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[Any]:
        try:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not entry.is_live(self.clock.timestamp()):
                del self._store[key]
                return None
            return entry.data
        except Exception as e:
            logger.error(f"Memory cache get error for {key}: {e}")
            return None

    async def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        try:
            self._store[key] = CacheEntry(
                data=data,
                timestamp=self.clock.timestamp(),
                ttl=ttl or self.default_ttl,
            )
            if len(self._store) > PRUNE_THRESHOLD:
                self.prune_expired()
        except Exception as e:
            logger.error(f"Memory cache set error for {key}: {e}")

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def clear(self, pattern: Optional[str] = None) -> None:
        if pattern is None:
            self._store.clear()
            return
        for key in [k for k in self._store if fnmatch.fnmatchcase(k, pattern)]:
            del self._store[key]

    def prune_expired(self) -> int:
        now = self.clock.timestamp()
        expired = [k for k, entry in self._store.items() if not entry.is_live(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)

    def stats(self) -> Dict[str, Any]:
        return {"backend": "memory", "remote_connected": False, "memory_entries": len(self._store)}
