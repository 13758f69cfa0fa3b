from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.encryption_key_repository import IEncryptionKeyRepository
from src.domain.entities import EncryptionKey


class EncryptionKeyRepository(IEncryptionKeyRepository):
    """EncryptionKey repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, key_id: UUID) -> Optional[EncryptionKey]:
        """Get key by ID"""
        stmt = select(EncryptionKey).where(EncryptionKey.id == key_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_tenant(self, tenant_id: UUID) -> List[EncryptionKey]:
        """Get all keys of a tenant, newest first"""
        stmt = (
            select(EncryptionKey)
            .where(EncryptionKey.tenant_id == tenant_id)
            .order_by(EncryptionKey.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, key: EncryptionKey) -> EncryptionKey:
        """Create a new key"""
        self.session.add(key)
        await self.session.flush()
        await self.session.refresh(key)
        return key

    async def update(self, key: EncryptionKey) -> EncryptionKey:
        """Update existing key"""
        self.session.add(key)
        await self.session.flush()
        await self.session.refresh(key)
        return key

    async def delete(self, key: EncryptionKey) -> None:
        """Delete a key permanently"""
        await self.session.delete(key)
        await self.session.flush()
