"""
Verify MFA Code Use Case

Checks a TOTP, SMS or backup code against a user's device, with per-user
brute force throttling.
"""

import logging
from uuid import UUID

import pyotp

from libs.result import Error, Result, Return
from src.app.services.backup_codes import (
    generate_backup_codes,
    hash_backup_code,
    match_backup_code,
)
from src.app.services.field_cipher import FieldCipher
from src.app.services.mfa_token_cache import MFATokenCache
from src.app.services.rate_limiter import RateLimiter
from src.app.services.security_audit_service import SecurityAuditService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import (
    MfaCodeType,
    MfaDevice,
    MfaDeviceType,
    RequestContext,
    SecurityEventType,
    SecuritySeverity,
)
from .dtos import VerifyMfaCodeCommand, VerifyMfaCodeResponse

logger = logging.getLogger(__name__)

EVENT_SOURCE = "MFA Verification"

# Code type -> device type it applies to; backup codes work on any device
DEVICE_TYPE_FOR_CODE = {
    MfaCodeType.totp: MfaDeviceType.totp,
    MfaCodeType.sms: MfaDeviceType.sms,
}


class VerifyMfaCodeUseCase:
    """
    Use case for verifying a second-factor code.

    Business Rules:
    - At most `max_attempts` verifications per user per window; the
      attempt that trips the limit logs BRUTE_FORCE_ATTEMPT (high)
    - Unknown devices and devices of other users are not found
    - Code type must match the device type (backup codes match any)
    - A verified device that was disabled cannot be used
    - A wrong code logs UNAUTHORIZED_ACCESS (medium)
    - TOTP accepts one step of clock drift either way
    - First successful TOTP/SMS verification marks the device verified
      and enabled and issues 10 backup codes, returned only then
    - Backup codes are consumed on use
    """

    def __init__(
        self,
        uow: UnitOfWork,
        audit: SecurityAuditService,
        rate_limiter: RateLimiter,
        tokens: MFATokenCache,
        cipher: FieldCipher,
        max_attempts: int = 5,
        window_seconds: int = 900,
    ):
        self.uow = uow
        self.audit = audit
        self.rate_limiter = rate_limiter
        self.tokens = tokens
        self.cipher = cipher
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds

    async def execute(
        self, user_id: UUID, command: VerifyMfaCodeCommand, context: RequestContext
    ) -> Result[VerifyMfaCodeResponse]:
        attempts = self.rate_limiter.check(
            f"mfa:{user_id}", self.max_attempts, self.window_seconds
        )
        if not attempts.allowed:
            self.audit.log_security_event(
                SecurityEventType.BRUTE_FORCE_ATTEMPT,
                SecuritySeverity.high,
                EVENT_SOURCE,
                f"Too many MFA verification attempts for user {user_id}",
                {"attempts": attempts.total_hits, "device_id": str(command.device_id)},
                context,
            )
            return Return.err(
                Error("TOO_MANY_ATTEMPTS", "Too many verification attempts, try again later")
            )

        async with self.uow:
            device = await self.uow.mfa_devices.get_by_id(command.device_id)
            if device is None or device.user_id != user_id:
                return Return.err(Error("DEVICE_NOT_FOUND", "MFA device not found"))

            expected_type = DEVICE_TYPE_FOR_CODE.get(command.type)
            if expected_type is not None and device.type != expected_type:
                return Return.err(
                    Error(
                        "DEVICE_TYPE_MISMATCH",
                        f"Code type {command.type.value} does not match a {device.type.value} device",
                    )
                )
            if device.verified and not device.enabled:
                return Return.err(Error("DEVICE_DISABLED", "MFA device is disabled"))

            valid = await self._check_code(device, command)
            if not valid:
                self.audit.log_security_event(
                    SecurityEventType.UNAUTHORIZED_ACCESS,
                    SecuritySeverity.medium,
                    EVENT_SOURCE,
                    f"Invalid MFA code for device {device.id}",
                    {"device_id": str(device.id), "code_type": command.type.value},
                    context,
                )
                return Return.err(Error("INVALID_CODE", "Invalid verification code"))

            backup_codes = []
            if not device.verified and command.type != MfaCodeType.backup_code:
                backup_codes = generate_backup_codes()
                device.backup_code_hashes = [hash_backup_code(c) for c in backup_codes]
                device.verified = True
                device.enabled = True
                logger.info(f"MFA device {device.id} verified for user {user_id}")

            device.last_used_at = self.audit.clock.now()
            await self.uow.mfa_devices.update(device)
            await self.uow.commit()

            return Return.ok(
                VerifyMfaCodeResponse(
                    verified=True,
                    device_id=str(device.id),
                    backup_codes=backup_codes,
                    remaining_backup_codes=len(device.backup_code_hashes),
                )
            )

    async def _check_code(self, device: MfaDevice, command: VerifyMfaCodeCommand) -> bool:
        if command.type == MfaCodeType.totp:
            if not device.secret_encrypted:
                return False
            secret = self.cipher.decrypt(device.secret_encrypted)
            return pyotp.TOTP(secret).verify(
                command.code, for_time=self.audit.clock.now(), valid_window=1
            )

        if command.type == MfaCodeType.sms:
            return await self.tokens.verify_code(str(device.id), command.code)

        matched = match_backup_code(command.code, device.backup_code_hashes)
        if matched is None:
            return False
        # Reassign so the JSON column is flagged dirty
        device.backup_code_hashes = [h for h in device.backup_code_hashes if h != matched]
        return True
