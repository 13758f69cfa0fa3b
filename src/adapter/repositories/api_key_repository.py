from datetime import datetime
from typing import Dict, List, Optional

from src.app.repositories.api_key_repository import IApiKeyRepository
from src.domain.entities import ApiKey, ApiKeyUsage


class InMemoryApiKeyRepository(IApiKeyRepository):
    """Process-local API key store; usage lists are kept in append order"""

    def __init__(self):
        self._keys: Dict[str, ApiKey] = {}
        self._ids_by_hash: Dict[str, str] = {}
        self._usage: Dict[str, List[ApiKeyUsage]] = {}

    def create(self, api_key: ApiKey) -> ApiKey:
        self._keys[api_key.id] = api_key
        self._ids_by_hash[api_key.key_hash] = api_key.id
        self._usage[api_key.id] = []
        return api_key

    def get_by_id(self, key_id: str) -> Optional[ApiKey]:
        return self._keys.get(key_id)

    def get_by_hash(self, key_hash: str) -> Optional[ApiKey]:
        key_id = self._ids_by_hash.get(key_hash)
        if key_id is None:
            return None
        return self._keys.get(key_id)

    def get_by_organization(self, organization_id: str) -> List[ApiKey]:
        return [k for k in self._keys.values() if k.organization_id == organization_id]

    def update(self, api_key: ApiKey) -> ApiKey:
        self._keys[api_key.id] = api_key
        return api_key

    def delete(self, key_id: str) -> bool:
        api_key = self._keys.pop(key_id, None)
        if api_key is None:
            return False
        self._ids_by_hash.pop(api_key.key_hash, None)
        self._usage.pop(key_id, None)
        return True

    def add_usage(self, key_id: str, usage: ApiKeyUsage) -> None:
        self._usage.setdefault(key_id, []).append(usage)

    def get_usage(self, key_id: str) -> List[ApiKeyUsage]:
        return self._usage.get(key_id, [])

    def delete_usage_older_than(self, cutoff: datetime) -> int:
        removed = 0
        for key_id, records in self._usage.items():
            kept = [u for u in records if u.timestamp > cutoff]
            removed += len(records) - len(kept)
            self._usage[key_id] = kept
        return removed
