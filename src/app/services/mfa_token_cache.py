import hmac
from typing import Optional

from .cache import ICache

DEFAULT_CODE_TTL = 300


class MFATokenCache:
    """Short-lived SMS verification codes, one per device"""

    def __init__(self, cache: ICache, ttl: int = DEFAULT_CODE_TTL):
        self.cache = cache
        self.ttl = ttl

    @staticmethod
    def _key(device_id: str) -> str:
        return f"mfa:sms:{device_id}"

    async def store_code(self, device_id: str, code: str, ttl: Optional[int] = None) -> None:
        await self.cache.set(self._key(device_id), code, ttl or self.ttl)

    async def verify_code(self, device_id: str, code: str) -> bool:
        """True when `code` matches the live code; a match consumes it"""
        stored = await self.cache.get(self._key(device_id))
        if stored is None:
            return False
        if not hmac.compare_digest(str(stored).encode(), code.encode()):
            return False
        await self.cache.delete(self._key(device_id))
        return True
