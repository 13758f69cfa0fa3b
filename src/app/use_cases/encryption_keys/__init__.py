"""
Encryption Key Use Cases
"""

from .create_encryption_key_use_case import CreateEncryptionKeyUseCase
from .manage_encryption_keys_use_case import (
    DeleteEncryptionKeyUseCase,
    ListEncryptionKeysUseCase,
    UpdateEncryptionKeyUseCase,
)
from .dtos import (
    CreateEncryptionKeyCommand,
    EncryptionKeyResponse,
    EncryptionKeysResponse,
    UpdateEncryptionKeyCommand,
)

__all__ = [
    # Use Cases
    "CreateEncryptionKeyUseCase",
    "ListEncryptionKeysUseCase",
    "UpdateEncryptionKeyUseCase",
    "DeleteEncryptionKeyUseCase",
    # DTOs
    "CreateEncryptionKeyCommand",
    "UpdateEncryptionKeyCommand",
    "EncryptionKeyResponse",
    "EncryptionKeysResponse",
]
