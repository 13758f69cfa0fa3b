"""
EncryptionKey Entity

Tenant data-encryption keys, wrapped by the service master key.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from .enums import EncryptionKeyStatus


class EncryptionKey(SQLModel, table=True):
    """
    EncryptionKey entity - a tenant data key.

    Business Rules:
    - Key material is stored wrapped (Fernet) and never returned by the API
    - Rotation replaces material and bumps version
    - Deletion must be forced explicitly
    """

    __tablename__ = "encryption_keys"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(nullable=False, index=True)

    name: str = Field(max_length=100)
    algorithm: str = Field(default="fernet", max_length=32)
    purpose: str = Field(default="data", max_length=64)
    version: int = Field(default=1)
    status: EncryptionKeyStatus = Field(default=EncryptionKeyStatus.active)

    key_material_encrypted: str

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    rotated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_encryption_key_tenant_status", "tenant_id", "status"),)
