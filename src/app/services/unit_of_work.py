from abc import ABC, abstractmethod

from src.app.repositories.encryption_key_repository import IEncryptionKeyRepository
from src.app.repositories.mfa_device_repository import IMfaDeviceRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    mfa_devices: IMfaDeviceRepository
    encryption_keys: IEncryptionKeyRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
