"""
Encryption Key Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from src.domain.entities import EncryptionKey, EncryptionKeyStatus


class CreateEncryptionKeyCommand(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    purpose: str = Field(default="data", min_length=1, max_length=64)


class UpdateEncryptionKeyCommand(BaseModel):
    action: Optional[Literal["rotate", "disable", "enable"]] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class EncryptionKeyResponse(BaseModel):
    """Key metadata; key material is never exposed"""

    id: str
    name: str
    algorithm: str
    purpose: str
    version: int
    status: EncryptionKeyStatus
    created_at: datetime
    rotated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, key: EncryptionKey) -> "EncryptionKeyResponse":
        return cls(
            id=str(key.id),
            name=key.name,
            algorithm=key.algorithm,
            purpose=key.purpose,
            version=key.version,
            status=key.status,
            created_at=key.created_at,
            rotated_at=key.rotated_at,
        )


class EncryptionKeysResponse(BaseModel):
    keys: List[EncryptionKeyResponse]
