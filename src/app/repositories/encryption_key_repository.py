from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import EncryptionKey


class IEncryptionKeyRepository(ABC):
    """EncryptionKey repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, key_id: UUID) -> Optional[EncryptionKey]:
        """Get key by ID"""
        pass

    @abstractmethod
    async def get_by_tenant(self, tenant_id: UUID) -> List[EncryptionKey]:
        """Get all keys of a tenant, newest first"""
        pass

    @abstractmethod
    async def create(self, key: EncryptionKey) -> EncryptionKey:
        """Create a new key"""
        pass

    @abstractmethod
    async def update(self, key: EncryptionKey) -> EncryptionKey:
        """Update existing key"""
        pass

    @abstractmethod
    async def delete(self, key: EncryptionKey) -> None:
        """Delete a key permanently"""
        pass
