"""
MFA Use Case DTOs (Data Transfer Objects)
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.domain.entities import MfaCodeType, MfaDeviceType


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterMfaDeviceCommand(BaseModel):
    type: MfaDeviceType
    name: str = Field(..., min_length=1, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=32)


class SendSmsCodeCommand(BaseModel):
    device_id: UUID


class VerifyMfaCodeCommand(BaseModel):
    device_id: UUID
    code: str = Field(..., min_length=6, max_length=8, pattern=r"^[0-9]+$")
    type: MfaCodeType


# ============================================================================
# Response DTOs
# ============================================================================


class RegisterMfaDeviceResponse(BaseModel):
    """TOTP secret and provisioning URI are shown only once"""

    device_id: str
    type: MfaDeviceType
    name: str
    verified: bool
    secret: Optional[str] = None
    provisioning_uri: Optional[str] = None


class SendSmsCodeResponse(BaseModel):
    sent: bool
    expires_in: int


class VerifyMfaCodeResponse(BaseModel):
    verified: bool
    device_id: str
    backup_codes: List[str] = Field(default_factory=list)
    remaining_backup_codes: int
