"""
ApiKey Entity

Organization-scoped API credentials and their usage log.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .enums import ApiKeyPermission
from .security_event import random_suffix


def generate_key_id(now: datetime) -> str:
    return f"ak_{int(now.timestamp() * 1000)}_{random_suffix()}"


class RateLimit(BaseModel):
    """Quota: at most `requests` calls per `window_seconds`"""

    requests: int = Field(gt=0)
    window_seconds: int = Field(gt=0)


class ApiKey(BaseModel):
    """
    ApiKey entity - organization-scoped API credential.

    Business Rules:
    - Only the SHA-256 hash of the secret is kept
    - The plaintext secret is handed out once, at creation
    - Deleting a key discards its usage history
    """

    id: str
    name: str
    organization_id: str
    key_hash: str = Field(default="", exclude=True, repr=False)
    permissions: List[ApiKeyPermission] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime
    last_used_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    rate_limit: RateLimit
    usage_count: int = 0


class ApiKeyUsage(BaseModel):
    """One authenticated call made with an API key"""

    timestamp: datetime
    endpoint: str
    method: str
    ip_address: str = "unknown"
    user_agent: str = "unknown"
    response_status: int
    response_time: float  # milliseconds


API_PERMISSIONS = {
    "READ_ONLY": [
        ApiKeyPermission.read_organizations,
        ApiKeyPermission.read_users,
    ],
    "FULL_ACCESS": list(ApiKeyPermission),
    "WEBHOOK_ACCESS": [ApiKeyPermission.webhook_access],
    "ADMIN_ACCESS": [
        ApiKeyPermission.read_organizations,
        ApiKeyPermission.write_organizations,
        ApiKeyPermission.read_users,
        ApiKeyPermission.write_users,
        ApiKeyPermission.admin_access,
    ],
}
