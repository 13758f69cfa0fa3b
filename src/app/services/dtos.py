"""
Security Service DTOs (Data Transfer Objects)

Shapes returned by the in-memory security services.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from src.domain.entities import ApiKey, SecurityEvent, SecurityEventType

Priority = Literal["low", "medium", "high", "critical"]
Level = Literal["low", "medium", "high"]
Trend = Literal["increasing", "decreasing", "stable"]


# ============================================================================
# Audit report
# ============================================================================


class ReportPeriod(BaseModel):
    start: datetime
    end: datetime


class ReportSummary(BaseModel):
    total_events: int
    critical_events: int
    high_severity_events: int
    medium_severity_events: int
    low_severity_events: int
    resolved_events: int
    unresolved_events: int


class ThreatSummary(BaseModel):
    type: SecurityEventType
    count: int
    trend: Trend


class SecurityRecommendation(BaseModel):
    id: str
    priority: Priority
    category: Literal[
        "authentication", "authorization", "data_protection", "network", "application"
    ]
    title: str
    description: str
    action_items: List[str]
    estimated_effort: Level
    impact: Level


class SecurityVulnerability(BaseModel):
    id: str
    type: str
    severity: Priority
    component: str
    description: str
    cve: Optional[str] = None
    fix_available: bool
    fix_description: Optional[str] = None
    detected_at: datetime


class SecurityAuditReport(BaseModel):
    id: str
    generated_at: datetime
    period: ReportPeriod
    summary: ReportSummary
    top_threats: List[ThreatSummary]
    recommendations: List[SecurityRecommendation]
    vulnerabilities: List[SecurityVulnerability]


# ============================================================================
# Pattern analysis
# ============================================================================


class SuspiciousIdentifier(BaseModel):
    identifier: str
    event_count: int
    risk_score: int


class Anomaly(BaseModel):
    type: str
    description: str
    severity: str


class SuspiciousPatterns(BaseModel):
    suspicious_ips: List[SuspiciousIdentifier]
    suspicious_users: List[SuspiciousIdentifier]
    anomalies: List[Anomaly]


# ============================================================================
# Statistics
# ============================================================================


class CountByKey(BaseModel):
    key: str
    count: int


class SecurityMetrics(BaseModel):
    """Blocked and hostile traffic over a period"""

    total_events: int
    blocked_requests: int
    rate_limit_violations: int
    brute_force_attempts: int
    suspicious_activity: int
    top_blocked_ips: List[CountByKey]
    top_targeted_endpoints: List[CountByKey]
    period: ReportPeriod


class SecurityStats(BaseModel):
    total_events: int
    events_by_type: Dict[str, int]
    events_by_severity: Dict[str, int]
    recent_events: List[SecurityEvent]
    top_ips: List[CountByKey]
    top_endpoints: List[CountByKey]
    metrics: Optional[SecurityMetrics] = None


# ============================================================================
# IP blocking
# ============================================================================


class IpBlockStatus(BaseModel):
    ip: str
    blocked: bool
    reason: Optional[str] = None
    blocked_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None


# ============================================================================
# API keys
# ============================================================================


class CreatedApiKey(BaseModel):
    api_key: ApiKey
    secret_key: str


class RateLimitStatus(BaseModel):
    allowed: bool
    remaining: int
    reset_time: datetime
    total_hits: int = 0
    retry_at: Optional[datetime] = None


class ApiKeyValidationResult(BaseModel):
    """rate_limit_exceeded separates quota rejections (429) from invalid keys"""

    valid: bool
    api_key: Optional[ApiKey] = None
    error: Optional[str] = None
    rate_limit_exceeded: bool = False
    quota: Optional[RateLimitStatus] = None


class UsageStats(BaseModel):
    total_requests: int
    successful_requests: int
    failed_requests: int
    average_response_time: float
    top_endpoints: List[CountByKey]
    requests_by_hour: List[CountByKey]


class DiagnosticResult(BaseModel):
    success: bool
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
