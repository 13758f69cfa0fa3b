"""
Get API Key Usage Use Case
"""

from datetime import datetime, timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.dtos import UsageStats
from src.app.use_cases.common import as_utc, require_admin_role
from .manage_api_keys_use_case import KEY_NOT_FOUND, _TenantKeyUseCase


class GetApiKeyUsageUseCase(_TenantKeyUseCase):
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Period defaults to the last 24 hours
    """

    async def execute(
        self,
        tenant_id: str,
        role: str,
        key_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Result[UsageStats]:
        error = require_admin_role(role, "manage API keys")
        if error:
            return Return.err(error)
        if self._load(tenant_id, key_id) is None:
            return Return.err(KEY_NOT_FOUND)

        end = as_utc(end) or self.manager.clock.now()
        start = as_utc(start) or end - timedelta(hours=24)
        if start >= end:
            return Return.err(Error("INVALID_PERIOD", "start must be earlier than end"))

        return Return.ok(self.manager.get_usage_stats(key_id, start, end))
