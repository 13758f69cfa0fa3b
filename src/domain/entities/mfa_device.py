"""
MfaDevice Entity

Second-factor devices registered by users.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from .enums import MfaDeviceType


class MfaDevice(SQLModel, table=True):
    """
    MfaDevice entity - a TOTP authenticator or SMS phone number.

    Business Rules:
    - TOTP secret stored encrypted with the master key
    - Backup codes stored as SHA-256 hashes, each usable once
    - Device becomes verified and enabled on first successful verification
    """

    __tablename__ = "mfa_devices"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(nullable=False, index=True)
    tenant_id: UUID = Field(nullable=False, index=True)

    type: MfaDeviceType
    name: str = Field(max_length=100)
    secret_encrypted: Optional[str] = Field(default=None)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    backup_code_hashes: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    verified: bool = Field(default=False)
    enabled: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    last_used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_mfa_device_user_tenant", "user_id", "tenant_id"),)
