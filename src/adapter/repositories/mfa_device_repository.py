from typing import List, Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.mfa_device_repository import IMfaDeviceRepository
from src.domain.entities import MfaDevice


class MfaDeviceRepository(IMfaDeviceRepository):
    """MfaDevice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, device_id: UUID) -> Optional[MfaDevice]:
        """Get device by ID"""
        stmt = select(MfaDevice).where(MfaDevice.id == device_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user_id(self, user_id: UUID) -> List[MfaDevice]:
        """Get all devices registered by a user"""
        stmt = (
            select(MfaDevice)
            .where(MfaDevice.user_id == user_id)
            .order_by(MfaDevice.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, device: MfaDevice) -> MfaDevice:
        """Create a new device"""
        self.session.add(device)
        await self.session.flush()
        await self.session.refresh(device)
        return device

    async def update(self, device: MfaDevice) -> MfaDevice:
        """Update existing device"""
        self.session.add(device)
        await self.session.flush()
        await self.session.refresh(device)
        return device
