"""
API Key Use Cases

All API-key-management business logic.
"""

from .create_api_key_use_case import CreateApiKeyUseCase
from .manage_api_keys_use_case import (
    DeleteApiKeyUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
    UpdateApiKeyUseCase,
)
from .get_api_key_usage_use_case import GetApiKeyUsageUseCase
from .dtos import (
    ApiKeysResponse,
    CreateApiKeyCommand,
    CreateApiKeyResponse,
    UpdateApiKeyCommand,
)

__all__ = [
    # Use Cases
    "CreateApiKeyUseCase",
    "ListApiKeysUseCase",
    "GetApiKeyUseCase",
    "UpdateApiKeyUseCase",
    "DeleteApiKeyUseCase",
    "GetApiKeyUsageUseCase",
    # DTOs
    "CreateApiKeyCommand",
    "UpdateApiKeyCommand",
    "CreateApiKeyResponse",
    "ApiKeysResponse",
]
