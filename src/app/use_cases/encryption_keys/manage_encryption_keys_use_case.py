"""
Manage Encryption Keys Use Cases

List, update (rotate, disable, enable, rename) and delete tenant keys.
"""

import logging
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.clock import Clock, SystemClock
from src.app.services.field_cipher import FieldCipher
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import require_admin_role
from src.domain.entities import EncryptionKeyStatus
from .dtos import EncryptionKeyResponse, EncryptionKeysResponse, UpdateEncryptionKeyCommand

logger = logging.getLogger(__name__)

KEY_NOT_FOUND = Error("KEY_NOT_FOUND", "Encryption key not found")


class ListEncryptionKeysUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, tenant_id: UUID, role: str) -> Result[EncryptionKeysResponse]:
        error = require_admin_role(role, "manage encryption keys")
        if error:
            return Return.err(error)

        async with self.uow:
            keys = await self.uow.encryption_keys.get_by_tenant(tenant_id)

            return Return.ok(
                EncryptionKeysResponse(keys=[EncryptionKeyResponse.from_entity(k) for k in keys])
            )


class UpdateEncryptionKeyUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Keys of other tenants are reported as not found
    - rotate: new material, version + 1 (disabled keys cannot be rotated)
    - disable / enable: toggle status
    - name: rename, may be combined with an action
    """

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher, clock: Optional[Clock] = None):
        self.uow = uow
        self.cipher = cipher
        self.clock = clock or SystemClock()

    async def execute(
        self, tenant_id: UUID, role: str, key_id: UUID, command: UpdateEncryptionKeyCommand
    ) -> Result[EncryptionKeyResponse]:
        error = require_admin_role(role, "manage encryption keys")
        if error:
            return Return.err(error)

        if command.action is None and command.name is None:
            return Return.err(Error("NOTHING_TO_UPDATE", "Provide an action or a name"))

        async with self.uow:
            key = await self.uow.encryption_keys.get_by_id(key_id)
            if key is None or key.tenant_id != tenant_id:
                return Return.err(KEY_NOT_FOUND)

            if command.action == "rotate":
                if key.status == EncryptionKeyStatus.disabled:
                    return Return.err(Error("KEY_DISABLED", "Disabled keys cannot be rotated"))
                key.key_material_encrypted = self.cipher.encrypt(FieldCipher.generate_key())
                key.version += 1
                key.rotated_at = self.clock.now()
            elif command.action == "disable":
                key.status = EncryptionKeyStatus.disabled
            elif command.action == "enable":
                key.status = EncryptionKeyStatus.active

            if command.name is not None:
                key.name = command.name

            key = await self.uow.encryption_keys.update(key)
            await self.uow.commit()

            if command.action:
                logger.info(f"Encryption key {key_id} {command.action}d (version {key.version})")
            return Return.ok(EncryptionKeyResponse.from_entity(key))


class DeleteEncryptionKeyUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Data encrypted with the key becomes unreadable, so deletion must
      be confirmed with force=true
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, tenant_id: UUID, role: str, key_id: UUID, force: bool = False
    ) -> Result[None]:
        error = require_admin_role(role, "manage encryption keys")
        if error:
            return Return.err(error)

        if not force:
            return Return.err(
                Error("FORCE_REQUIRED", "Deleting a key requires force=true")
            )

        async with self.uow:
            key = await self.uow.encryption_keys.get_by_id(key_id)
            if key is None or key.tenant_id != tenant_id:
                return Return.err(KEY_NOT_FOUND)

            await self.uow.encryption_keys.delete(key)
            await self.uow.commit()

        logger.warning(f"Encryption key {key_id} deleted for tenant {tenant_id}")
        return Return.ok(None)
