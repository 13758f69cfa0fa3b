"""
Register MFA Device Use Case
"""

import logging
from uuid import UUID

import pyotp

from libs.result import Error, Result, Return
from src.app.services.field_cipher import FieldCipher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MfaDevice, MfaDeviceType
from .dtos import RegisterMfaDeviceCommand, RegisterMfaDeviceResponse

logger = logging.getLogger(__name__)

TOTP_ISSUER = "Security Service"


class RegisterMfaDeviceUseCase:
    """
    Use case for registering a second-factor device.

    Business Rules:
    - totp: a new base32 secret is generated, stored encrypted, and
      returned once together with the otpauth:// provisioning URI
    - sms: phone_number is required
    - The device stays unverified until its first successful code
    """

    def __init__(self, uow: UnitOfWork, cipher: FieldCipher, issuer: str = TOTP_ISSUER):
        self.uow = uow
        self.cipher = cipher
        self.issuer = issuer

    async def execute(
        self, user_id: UUID, tenant_id: UUID, command: RegisterMfaDeviceCommand
    ) -> Result[RegisterMfaDeviceResponse]:
        secret = None
        provisioning_uri = None

        device = MfaDevice(
            user_id=user_id,
            tenant_id=tenant_id,
            type=command.type,
            name=command.name,
        )

        if command.type == MfaDeviceType.totp:
            secret = pyotp.random_base32()
            device.secret_encrypted = self.cipher.encrypt(secret)
            provisioning_uri = pyotp.TOTP(secret).provisioning_uri(
                name=command.name, issuer_name=self.issuer
            )
        else:
            phone_number = (command.phone_number or "").strip()
            if not phone_number:
                return Return.err(
                    Error("PHONE_NUMBER_REQUIRED", "phone_number is required for SMS devices")
                )
            device.phone_number = phone_number

        async with self.uow:
            device = await self.uow.mfa_devices.create(device)
            await self.uow.commit()

            logger.info(f"MFA device {device.id} ({device.type.value}) registered for user {user_id}")

            return Return.ok(
                RegisterMfaDeviceResponse(
                    device_id=str(device.id),
                    type=device.type,
                    name=device.name,
                    verified=device.verified,
                    secret=secret,
                    provisioning_uri=provisioning_uri,
                )
            )
