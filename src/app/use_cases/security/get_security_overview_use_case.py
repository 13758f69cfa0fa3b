"""
Security Overview Use Cases

Statistics and suspicious-pattern analysis over recent events.
"""

from datetime import datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.dtos import SecurityStats, SuspiciousPatterns
from src.app.services.security_audit_service import SecurityAuditService
from src.app.use_cases.common import as_utc, require_admin_role


class GetSecurityStatsUseCase:
    """Counts by type/severity, top IPs and endpoints (default: last 24h)"""

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(
        self,
        role: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Result[SecurityStats]:
        error = require_admin_role(role, "view security statistics")
        if error:
            return Return.err(error)
        return Return.ok(
            self.audit.get_security_stats(as_utc(start_date), as_utc(end_date))
        )


class AnalyzeSecurityPatternsUseCase:
    """Risk-scored IPs and users over the last 24h, plus activity spikes"""

    def __init__(self, audit: SecurityAuditService):
        self.audit = audit

    async def execute(self, role: str) -> Result[SuspiciousPatterns]:
        error = require_admin_role(role, "analyze security patterns")
        if error:
            return Return.err(error)
        return Return.ok(self.audit.analyze_suspicious_patterns())
