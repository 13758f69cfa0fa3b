"""
MFA Use Cases

Device registration, SMS delivery and code verification.
"""

from .register_device_use_case import RegisterMfaDeviceUseCase
from .send_sms_code_use_case import SendSmsCodeUseCase
from .verify_code_use_case import VerifyMfaCodeUseCase
from .dtos import (
    RegisterMfaDeviceCommand,
    RegisterMfaDeviceResponse,
    SendSmsCodeCommand,
    SendSmsCodeResponse,
    VerifyMfaCodeCommand,
    VerifyMfaCodeResponse,
)

__all__ = [
    # Use Cases
    "RegisterMfaDeviceUseCase",
    "SendSmsCodeUseCase",
    "VerifyMfaCodeUseCase",
    # DTOs
    "RegisterMfaDeviceCommand",
    "RegisterMfaDeviceResponse",
    "SendSmsCodeCommand",
    "SendSmsCodeResponse",
    "VerifyMfaCodeCommand",
    "VerifyMfaCodeResponse",
]
