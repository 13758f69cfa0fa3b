"""
Log Security Event Use Case

Records a security event reported by another service or the front end.
"""

from libs.result import Result, Return
from src.app.services.security_audit_service import SecurityAuditService
from src.domain.entities import RequestContext, SecurityEvent
from .dtos import LogSecurityEventCommand


class LogSecurityEventUseCase:
    """
    Use case for reporting a security event.

    Business Rules:
    - Any authenticated caller may report
    - The event is attributed to the caller's user and tenant
    - Never fails once the command is valid
    """

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(
        self, command: LogSecurityEventCommand, context: RequestContext
    ) -> Result[SecurityEvent]:
        event = self.audit.log_security_event(
            command.type,
            command.severity,
            command.source,
            command.description,
            command.metadata,
            context,
        )
        return Return.ok(event)
