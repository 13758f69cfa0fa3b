from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import MfaDevice


class IMfaDeviceRepository(ABC):
    """MfaDevice repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, device_id: UUID) -> Optional[MfaDevice]:
        """Get device by ID"""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[MfaDevice]:
        """Get all devices registered by a user"""
        pass

    @abstractmethod
    async def create(self, device: MfaDevice) -> MfaDevice:
        """Create a new device"""
        pass

    @abstractmethod
    async def update(self, device: MfaDevice) -> MfaDevice:
        """Update existing device"""
        pass
