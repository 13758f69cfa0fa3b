"""
Send SMS Code Use Case
"""

import secrets
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.mfa_token_cache import MFATokenCache
from src.app.services.sms_sender import ISmsSender
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import MfaDeviceType
from .dtos import SendSmsCodeCommand, SendSmsCodeResponse


class SendSmsCodeUseCase:
    """
    Business Rules:
    - Device must belong to the caller and be an SMS device
    - A fresh 6-digit code replaces any pending one
    - Code expires after the token cache TTL
    """

    def __init__(self, uow: UnitOfWork, tokens: MFATokenCache, sender: ISmsSender):
        self.uow = uow
        self.tokens = tokens
        self.sender = sender

    async def execute(
        self, user_id: UUID, command: SendSmsCodeCommand
    ) -> Result[SendSmsCodeResponse]:
        async with self.uow:
            device = await self.uow.mfa_devices.get_by_id(command.device_id)
            if device is None or device.user_id != user_id:
                return Return.err(Error("DEVICE_NOT_FOUND", "MFA device not found"))
            if device.type != MfaDeviceType.sms:
                return Return.err(Error("DEVICE_TYPE_MISMATCH", "Device is not an SMS device"))
            device_id = str(device.id)
            phone_number = device.phone_number

        code = f"{secrets.randbelow(10 ** 6):06d}"
        await self.tokens.store_code(device_id, code)
        await self.sender.send(
            phone_number,
            f"Your verification code is {code}. It expires in {self.tokens.ttl // 60} minutes.",
        )

        return Return.ok(SendSmsCodeResponse(sent=True, expires_in=self.tokens.ttl))
