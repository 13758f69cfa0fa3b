"""
API Key Use Case DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import ApiKey, ApiKeyPermission, RateLimit


# ============================================================================
# Command DTOs
# ============================================================================


class CreateApiKeyCommand(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    permissions: List[ApiKeyPermission] = Field(..., min_length=1)
    expires_at: Optional[datetime] = None
    rate_limit: Optional[RateLimit] = None


class UpdateApiKeyCommand(BaseModel):
    """Only fields that are set are applied"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    permissions: Optional[List[ApiKeyPermission]] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None
    rate_limit: Optional[RateLimit] = None


# ============================================================================
# Response DTOs
# ============================================================================


class CreateApiKeyResponse(BaseModel):
    """The secret key is shown only in this response"""

    api_key: ApiKey
    secret_key: str


class ApiKeysResponse(BaseModel):
    api_keys: List[ApiKey]
