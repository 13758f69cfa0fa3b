"""
Security Audit Report Generator

Aggregates stored security events over a period into a report with a
severity summary, the top threats and their trend, rule-based
recommendations and configuration vulnerabilities.
"""

from collections import Counter
from datetime import datetime
from typing import Callable, List, Optional

from config import DEFAULT_JWT_SECRET
from src.domain.entities import SecurityEvent, SecurityEventType, SecuritySeverity
from .clock import Clock
from .dtos import (
    ReportPeriod,
    ReportSummary,
    SecurityAuditReport,
    SecurityRecommendation,
    SecurityVulnerability,
    ThreatSummary,
)

TOP_THREATS_LIMIT = 10
TREND_THRESHOLD_PERCENT = 20

EventQuery = Callable[..., List[SecurityEvent]]


class SecurityAuditReportGenerator:
    """
    Builds SecurityAuditReport instances from an event query.

    `query` has the signature of SecurityAuditService.get_security_events;
    the generator only reads through it.
    """

    def __init__(self, query: EventQuery, clock: Clock, config=None):
        self.query = query
        self.clock = clock
        self.config = config

    def generate(self, start_date: datetime, end_date: datetime) -> SecurityAuditReport:
        events = self.query(start_date=start_date, end_date=end_date)
        now = self.clock.now()

        return SecurityAuditReport(
            id=f"audit_{int(now.timestamp() * 1000)}",
            generated_at=now,
            period=ReportPeriod(start=start_date, end=end_date),
            summary=self._summarize(events),
            top_threats=self._top_threats(events, start_date, end_date),
            recommendations=generate_recommendations(events),
            vulnerabilities=detect_vulnerabilities(self.config, now),
        )

    def _summarize(self, events: List[SecurityEvent]) -> ReportSummary:
        by_severity = Counter(e.severity for e in events)
        resolved = sum(1 for e in events if e.resolved)
        return ReportSummary(
            total_events=len(events),
            critical_events=by_severity[SecuritySeverity.critical],
            high_severity_events=by_severity[SecuritySeverity.high],
            medium_severity_events=by_severity[SecuritySeverity.medium],
            low_severity_events=by_severity[SecuritySeverity.low],
            resolved_events=resolved,
            unresolved_events=len(events) - resolved,
        )

    def _top_threats(
        self, events: List[SecurityEvent], start_date: datetime, end_date: datetime
    ) -> List[ThreatSummary]:
        counts = Counter(e.type for e in events)
        threats = [
            ThreatSummary(
                type=event_type,
                count=count,
                trend=self.calculate_trend(event_type, start_date, end_date),
            )
            for event_type, count in counts.items()
        ]
        threats.sort(key=lambda t: t.count, reverse=True)
        return threats[:TOP_THREATS_LIMIT]

    def calculate_trend(
        self, event_type: SecurityEventType, start_date: datetime, end_date: datetime
    ) -> str:
        """
        Compare the first and second half of the period.

        More than 20% growth is "increasing", more than 20% decline is
        "decreasing". With no events in the first half the change is
        taken as zero. The first half is [start, mid), the second [mid, end].
        """
        mid_point = start_date + (end_date - start_date) / 2

        events = self.query(type=event_type, start_date=start_date, end_date=end_date)
        first_half = sum(1 for e in events if e.timestamp < mid_point)
        second_half = len(events) - first_half

        change_percent = (
            (second_half - first_half) / first_half * 100 if first_half > 0 else 0
        )

        if change_percent > TREND_THRESHOLD_PERCENT:
            return "increasing"
        if change_percent < -TREND_THRESHOLD_PERCENT:
            return "decreasing"
        return "stable"


def generate_recommendations(events: List[SecurityEvent]) -> List[SecurityRecommendation]:
    counts = Counter(e.type for e in events)
    recommendations = []

    if counts[SecurityEventType.RATE_LIMIT_EXCEEDED] > 100:
        recommendations.append(
            SecurityRecommendation(
                id="rec_rate_limit",
                priority="high",
                category="network",
                title="Optimize Rate Limiting Configuration",
                description=(
                    "High number of rate limit violations detected. Consider adjusting "
                    "rate limits or implementing more sophisticated throttling."
                ),
                action_items=[
                    "Review current rate limit thresholds",
                    "Implement progressive rate limiting",
                    "Add IP-based blocking for repeat offenders",
                    "Consider implementing CAPTCHA for suspicious traffic",
                ],
                estimated_effort="medium",
                impact="high",
            )
        )

    if counts[SecurityEventType.BRUTE_FORCE_ATTEMPT] > 50:
        recommendations.append(
            SecurityRecommendation(
                id="rec_brute_force",
                priority="critical",
                category="authentication",
                title="Strengthen Brute Force Protection",
                description=(
                    "Multiple brute force attempts detected. Implement stronger "
                    "protection mechanisms."
                ),
                action_items=[
                    "Enable account lockout after failed attempts",
                    "Implement progressive delays",
                    "Add multi-factor authentication",
                    "Monitor and block suspicious IP addresses",
                ],
                estimated_effort="high",
                impact="high",
            )
        )

    if counts[SecurityEventType.MALICIOUS_REQUEST] > 20:
        recommendations.append(
            SecurityRecommendation(
                id="rec_input_validation",
                priority="high",
                category="application",
                title="Enhance Input Validation",
                description=(
                    "Malicious requests detected. Strengthen input validation and "
                    "sanitization."
                ),
                action_items=[
                    "Implement comprehensive input validation",
                    "Add request sanitization middleware",
                    "Enable Web Application Firewall (WAF)",
                    "Regular security code reviews",
                ],
                estimated_effort="medium",
                impact="high",
            )
        )

    return recommendations


def detect_vulnerabilities(config, now: datetime) -> List[SecurityVulnerability]:
    """Check a few configuration preconditions of a safe deployment"""
    if config is None:
        return []

    vulnerabilities = []

    jwt_secret: Optional[str] = getattr(config, "JWT_SECRET", None)
    if not jwt_secret or jwt_secret == DEFAULT_JWT_SECRET:
        vulnerabilities.append(
            SecurityVulnerability(
                id="vuln_auth_secret",
                type="Configuration",
                severity="high",
                component="Authentication",
                description="JWT signing secret not configured properly",
                fix_available=True,
                fix_description="Set JWT_SECRET in env.yaml to a secure random string",
                detected_at=now,
            )
        )

    environment = getattr(config, "ENVIRONMENT", "dev")
    public_url = getattr(config, "PUBLIC_URL", "") or ""
    if environment == "production" and not public_url.startswith("https://"):
        vulnerabilities.append(
            SecurityVulnerability(
                id="vuln_https",
                type="Network Security",
                severity="critical",
                component="Transport Layer",
                description="Application not configured to use HTTPS in production",
                fix_available=True,
                fix_description="Configure HTTPS and update PUBLIC_URL to use https://",
                detected_at=now,
            )
        )

    return vulnerabilities
