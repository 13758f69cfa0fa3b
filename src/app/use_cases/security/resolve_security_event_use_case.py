"""
Resolve Security Event Use Case

Marks a tenant's security event as resolved.
"""

from libs.result import Error, Result, Return
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import require_admin_role
from .dtos import ResolveSecurityEventResponse


class ResolveSecurityEventUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Events of other tenants are reported as not found
    - Resolving twice is a no-op success
    """

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(
        self, tenant_id: str, role: str, event_id: str
    ) -> Result[ResolveSecurityEventResponse]:
        error = require_admin_role(role, "resolve security events")
        if error:
            return Return.err(error)

        event = self.audit.repository.get_by_id(event_id)
        if event is None or event.organization_id != tenant_id:
            return Return.err(Error("EVENT_NOT_FOUND", "Security event not found"))

        self.audit.resolve_security_event(event_id)
        return Return.ok(ResolveSecurityEventResponse(id=event_id, resolved=True))
