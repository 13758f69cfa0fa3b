"""
MFA API Routes

Second-factor device registration, SMS codes and verification.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from libs.result import Error
from src.adapter.services.runtime import SecurityRuntime
from src.api.error import ClientError, ServerError
from src.api.utils.request_context import build_request_context
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.mfa import (
    RegisterMfaDeviceCommand,
    RegisterMfaDeviceResponse,
    RegisterMfaDeviceUseCase,
    SendSmsCodeCommand,
    SendSmsCodeResponse,
    SendSmsCodeUseCase,
    VerifyMfaCodeCommand,
    VerifyMfaCodeResponse,
    VerifyMfaCodeUseCase,
)
from src.depends import get_current_user, get_security_runtime, get_unit_of_work

router = APIRouter(prefix="/security-extended/mfa", tags=["MFA"])

ERROR_STATUS = {
    "DEVICE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DEVICE_TYPE_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "DEVICE_DISABLED": status.HTTP_400_BAD_REQUEST,
    "PHONE_NUMBER_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_CODE": status.HTTP_401_UNAUTHORIZED,
    "TOO_MANY_ATTEMPTS": status.HTTP_429_TOO_MANY_REQUESTS,
}


def raise_for_error(error: Error):
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


@router.post(
    "/devices", status_code=status.HTTP_201_CREATED, response_model=RegisterMfaDeviceResponse
)
async def register_device(
    command: RegisterMfaDeviceCommand,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Register MFA Device

    For TOTP devices the secret and provisioning URI are returned once.

    Raises:
        - 400 Bad Request: SMS device without phone_number
    """
    use_case = RegisterMfaDeviceUseCase(uow, runtime.cipher)
    result = await use_case.execute(
        UUID(current_user["user_id"]), UUID(current_user["tenant_id"]), command
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/sms", status_code=status.HTTP_200_OK, response_model=SendSmsCodeResponse)
async def send_sms_code(
    command: SendSmsCodeCommand,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """Send a 6-digit code to an SMS device"""
    use_case = SendSmsCodeUseCase(uow, runtime.mfa_tokens, runtime.sms_sender)
    result = await use_case.execute(UUID(current_user["user_id"]), command)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/verify", status_code=status.HTTP_200_OK, response_model=VerifyMfaCodeResponse)
async def verify_code(
    command: VerifyMfaCodeCommand,
    request: Request,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    runtime: SecurityRuntime = Depends(get_security_runtime),
):
    """
    Verify MFA Code

    Backup codes are returned only on a device's first successful verification.

    Raises:
        - 400 Bad Request: Code type does not match device, or device disabled
        - 401 Unauthorized: Wrong code
        - 404 Not Found: Unknown device
        - 429 Too Many Requests: Too many attempts
    """
    config = runtime.config
    use_case = VerifyMfaCodeUseCase(
        uow,
        runtime.audit,
        runtime.rate_limiter,
        runtime.mfa_tokens,
        runtime.cipher,
        max_attempts=config.MFA_MAX_ATTEMPTS,
        window_seconds=config.MFA_ATTEMPT_WINDOW_SECONDS,
    )
    result = await use_case.execute(
        UUID(current_user["user_id"]),
        command,
        build_request_context(request, current_user),
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value
