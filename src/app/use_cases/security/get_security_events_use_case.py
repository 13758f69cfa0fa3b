"""
Get Security Events Use Case

Lists a tenant's security events with filters and pagination.
"""

from libs.result import Result, Return
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import as_utc, require_admin_role
from .dtos import SecurityEventQuery, SecurityEventsResponse


class GetSecurityEventsUseCase:
    """
    Use case for listing security events.

    Business Rules:
    - Caller must have role=owner or role=admin
    - Results are tenant-scoped (organization_id = caller's tenant)
    - Results ordered by newest first; offset/limit applied after sorting
    """

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(
        self, tenant_id: str, role: str, query: SecurityEventQuery
    ) -> Result[SecurityEventsResponse]:
        error = require_admin_role(role, "view security events")
        if error:
            return Return.err(error)

        events = self.audit.get_security_events(
            type=query.type,
            severity=query.severity,
            resolved=query.resolved,
            start_date=as_utc(query.start_date),
            end_date=as_utc(query.end_date),
            user_id=query.user_id,
            organization_id=tenant_id,
            ip_address=query.ip_address,
            limit=query.limit,
            offset=query.offset,
        )
        return Return.ok(
            SecurityEventsResponse(events=events, limit=query.limit, offset=query.offset)
        )
