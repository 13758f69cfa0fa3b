from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.encryption_key_repository import EncryptionKeyRepository
from src.adapter.repositories.mfa_device_repository import MfaDeviceRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.mfa_devices = MfaDeviceRepository(self.session)
        self.encryption_keys = EncryptionKeyRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
