"""
Manage API Keys Use Cases

List, read, update and delete a tenant's API keys.
"""

from libs.result import Error, Result, Return
from src.app.services.api_key_manager import ApiKeyManager
from src.app.use_cases.common import require_admin_role
from src.domain.entities import ApiKey
from .create_api_key_use_case import check_expiry
from .dtos import ApiKeysResponse, UpdateApiKeyCommand

KEY_NOT_FOUND = Error("API_KEY_NOT_FOUND", "API key not found")

# expires_at: null clears the expiry; these may be omitted but never null
NON_NULLABLE_FIELDS = ("name", "permissions", "is_active", "rate_limit")


class _TenantKeyUseCase:
    def __init__(self, manager: ApiKeyManager):
        self.manager = manager

    def _load(self, tenant_id: str, key_id: str):
        """Key owned by the tenant, or None (other tenants' keys are hidden)"""
        api_key = self.manager.get_api_key(key_id)
        if api_key is None or api_key.organization_id != tenant_id:
            return None
        return api_key


class ListApiKeysUseCase(_TenantKeyUseCase):
    async def execute(self, tenant_id: str, role: str) -> Result[ApiKeysResponse]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)
        keys = sorted(self.manager.get_api_keys(tenant_id), key=lambda k: k.created_at)
        return Return.ok(ApiKeysResponse(api_keys=keys))


class GetApiKeyUseCase(_TenantKeyUseCase):
    async def execute(self, tenant_id: str, role: str, key_id: str) -> Result[ApiKey]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)
        api_key = self._load(tenant_id, key_id)
        if api_key is None:
            return Return.err(KEY_NOT_FOUND)
        return Return.ok(api_key)


class UpdateApiKeyUseCase(_TenantKeyUseCase):
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Only fields present in the request change
    - A new expires_at follows the same rules as at creation
    """

    async def execute(
        self, tenant_id: str, role: str, key_id: str, command: UpdateApiKeyCommand
    ) -> Result[ApiKey]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)
        if self._load(tenant_id, key_id) is None:
            return Return.err(KEY_NOT_FOUND)

        updates = command.model_dump(exclude_unset=True)
        nulled = [f for f in NON_NULLABLE_FIELDS if f in updates and updates[f] is None]
        if nulled:
            return Return.err(
                Error("INVALID_UPDATE", f"{', '.join(nulled)} cannot be null")
            )
        if command.expires_at is not None:
            error = check_expiry(command.expires_at, self.manager.clock.now())
            if error:
                return Return.err(error)

        if "rate_limit" in updates:
            updates["rate_limit"] = command.rate_limit
        if "permissions" in updates:
            updates["permissions"] = list(command.permissions)

        return Return.ok(self.manager.update_api_key(key_id, **updates))


class DeleteApiKeyUseCase(_TenantKeyUseCase):
    async def execute(self, tenant_id: str, role: str, key_id: str) -> Result[None]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)
        if self._load(tenant_id, key_id) is None:
            return Return.err(KEY_NOT_FOUND)

        self.manager.delete_api_key(key_id)
        return Return.ok(None)
