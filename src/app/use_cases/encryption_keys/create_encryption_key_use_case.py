"""
Create Encryption Key Use Case
"""

import logging
from uuid import UUID

from libs.result import Result, Return
from src.app.services.field_cipher import FieldCipher
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import require_admin_role
from src.domain.entities import EncryptionKey
from .dtos import CreateEncryptionKeyCommand, EncryptionKeyResponse

logger = logging.getLogger(__name__)


class CreateEncryptionKeyUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - A new Fernet data key is generated and wrapped with the master key
    - Starts at version 1, status active
    """

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher):
        self.uow = uow
        self.cipher = cipher

    async def execute(
        self, tenant_id: UUID, role: str, command: CreateEncryptionKeyCommand
    ) -> Result[EncryptionKeyResponse]:
        error = require_admin_role(role, "manage encryption keys")
        if error:
            return Return.err(error)

        async with self.uow:
            key = EncryptionKey(
                tenant_id=tenant_id,
                name=command.name,
                purpose=command.purpose,
                key_material_encrypted=self.cipher.encrypt(FieldCipher.generate_key()),
            )
            key = await self.uow.encryption_keys.create(key)
            await self.uow.commit()

            logger.info(f"Encryption key {key.id} created for tenant {tenant_id}")
            return Return.ok(EncryptionKeyResponse.from_entity(key))
