"""
Generate Security Audit Report Use Case
"""

from datetime import datetime, timedelta
from typing import Optional

from libs.result import Error, Result, Return
from src.app.services.dtos import SecurityAuditReport
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import as_utc, require_admin_role

DEFAULT_REPORT_PERIOD = timedelta(days=7)


class GenerateAuditReportUseCase:
    """
    Business Rules:
    - Caller must have role=owner or role=admin
    - Period defaults to the last 7 days
    - start_date must precede end_date
    """

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(
        self,
        role: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Result[SecurityAuditReport]:
        error = require_admin_role(role, "generate security reports")
        if error:
            return Return.err(error)

        end_date = as_utc(end_date) or self.audit.clock.now()
        start_date = as_utc(start_date) or end_date - DEFAULT_REPORT_PERIOD
        if start_date >= end_date:
            return Return.err(
                Error("INVALID_PERIOD", "start_date must be earlier than end_date")
            )

        return Return.ok(self.audit.generate_security_audit_report(start_date, end_date))
