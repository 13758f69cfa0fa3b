from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import ApiKey, ApiKeyUsage


class IApiKeyRepository(ABC):
    """ApiKey and usage-log store interface - application layer"""

    @abstractmethod
    def create(self, api_key: ApiKey) -> ApiKey:
        pass

    @abstractmethod
    def get_by_id(self, key_id: str) -> Optional[ApiKey]:
        pass

    @abstractmethod
    def get_by_hash(self, key_hash: str) -> Optional[ApiKey]:
        pass

    @abstractmethod
    def get_by_organization(self, organization_id: str) -> List[ApiKey]:
        pass

    @abstractmethod
    def update(self, api_key: ApiKey) -> ApiKey:
        pass

    @abstractmethod
    def delete(self, key_id: str) -> bool:
        """Delete a key and its usage history. False if unknown."""
        pass

    @abstractmethod
    def add_usage(self, key_id: str, usage: ApiKeyUsage) -> None:
        pass

    @abstractmethod
    def get_usage(self, key_id: str) -> List[ApiKeyUsage]:
        """Usage records for a key, oldest first"""
        pass

    @abstractmethod
    def delete_usage_older_than(self, cutoff: datetime) -> int:
        pass
