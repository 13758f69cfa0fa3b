"""
Create API Key Use Case
"""

from datetime import datetime
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.api_key_manager import ApiKeyManager
from src.app.use_cases.common import require_admin_role
from .dtos import CreateApiKeyCommand, CreateApiKeyResponse


def check_expiry(expires_at: datetime, now: datetime) -> Optional[Error]:
    """Expiry must carry an offset and lie in the future"""
    if expires_at.tzinfo is None:
        return Error("INVALID_EXPIRY", "expires_at must include a timezone")
    if expires_at <= now:
        return Error("INVALID_EXPIRY", "expires_at must be in the future")
    return None


class CreateApiKeyUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Key belongs to the caller's tenant
    - expires_at, when given, must be in the future
    - Plaintext secret returned once
    """

    def __init__(self, manager: ApiKeyManager):
        self.manager = manager

    async def execute(
        self, tenant_id: str, role: str, command: CreateApiKeyCommand
    ) -> Result[CreateApiKeyResponse]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)

        if command.expires_at is not None:
            error = check_expiry(command.expires_at, self.manager.clock.now())
            if error:
                return Return.err(error)

        created = self.manager.create_api_key(
            command.name,
            tenant_id,
            command.permissions,
            expires_at=command.expires_at,
            rate_limit=command.rate_limit,
        )
        return Return.ok(
            CreateApiKeyResponse(api_key=created.api_key, secret_key=created.secret_key)
        )
