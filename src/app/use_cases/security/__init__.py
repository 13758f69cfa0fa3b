"""
Security Event Use Cases

All security-event-related business logic.
"""

from .get_security_events_use_case import GetSecurityEventsUseCase
from .log_security_event_use_case import LogSecurityEventUseCase
from .resolve_security_event_use_case import ResolveSecurityEventUseCase
from .generate_audit_report_use_case import GenerateAuditReportUseCase
from .get_security_overview_use_case import (
    AnalyzeSecurityPatternsUseCase,
    GetSecurityStatsUseCase,
)
from .manage_ip_blocks_use_case import BlockIpUseCase, GetIpBlockUseCase, UnblockIpUseCase
from .dtos import (
    BlockIpCommand,
    LogSecurityEventCommand,
    ResolveSecurityEventResponse,
    SecurityEventQuery,
    SecurityEventsResponse,
)

__all__ = [
    # Use Cases
    "GetSecurityEventsUseCase",
    "LogSecurityEventUseCase",
    "ResolveSecurityEventUseCase",
    "GenerateAuditReportUseCase",
    "GetSecurityStatsUseCase",
    "AnalyzeSecurityPatternsUseCase",
    "BlockIpUseCase",
    "GetIpBlockUseCase",
    "UnblockIpUseCase",
    # DTOs
    "BlockIpCommand",
    "LogSecurityEventCommand",
    "SecurityEventQuery",
    "SecurityEventsResponse",
    "ResolveSecurityEventResponse",
]
