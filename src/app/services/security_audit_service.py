"""
Security Audit Service

Owns the in-memory security event store: logging, querying, resolving,
the retention sweep, statistics, and the periodic suspicious-pattern
analysis that feeds high-risk findings back into the store.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from src.app.repositories.security_event_repository import ISecurityEventRepository
from src.domain.entities import (
    RequestContext,
    SecurityEvent,
    SecurityEventType,
    SecuritySeverity,
)
from src.domain.entities.security_event import generate_event_id
from .alerts import IAlertSink
from .audit_report import SecurityAuditReportGenerator
from .clock import Clock
from .dtos import (
    Anomaly,
    CountByKey,
    ReportPeriod,
    SecurityAuditReport,
    SecurityMetrics,
    SecurityStats,
    SuspiciousIdentifier,
    SuspiciousPatterns,
)
from .risk_scorer import calculate_risk_score
from .scheduler import IScheduler, PeriodicTask

logger = logging.getLogger(__name__)

ALERT_SEVERITIES = (SecuritySeverity.high, SecuritySeverity.critical)
SUSPICIOUS_RISK_THRESHOLD = 50
AUTO_EVENT_RISK_THRESHOLD = 80
ANALYSIS_WINDOW = timedelta(hours=24)
SPIKE_FACTOR = 3

BLOCKING_EVENT_TYPES = (
    SecurityEventType.RATE_LIMIT_EXCEEDED,
    SecurityEventType.BRUTE_FORCE_ATTEMPT,
    SecurityEventType.UNAUTHORIZED_ACCESS,
)
SUSPICIOUS_EVENT_TYPES = (
    SecurityEventType.SUSPICIOUS_ACTIVITY,
    SecurityEventType.MALICIOUS_REQUEST,
    SecurityEventType.INVALID_REQUEST,
)

EventCallback = Callable[[SecurityEvent], None]


class SecurityAuditService:
    """
    In-memory security event bookkeeping.

    Business Rules:
    - Logging always succeeds and returns the created event
    - high/critical events are emitted to the alert sink
    - The repository caps the store (oldest evicted first)
    - Events older than the retention window are swept periodically
    - Hourly analysis logs a SUSPICIOUS_ACTIVITY event for every IP or
      user whose 24h risk score exceeds 80
    """

    def __init__(
        self,
        repository: ISecurityEventRepository,
        clock: Clock,
        alert_sink: IAlertSink,
        config=None,
        retention_days: int = 30,
    ):
        self.repository = repository
        self.clock = clock
        self.alert_sink = alert_sink
        self.retention_days = retention_days
        self.reports = SecurityAuditReportGenerator(self.get_security_events, clock, config)
        self._callbacks: List[EventCallback] = []
        self._tasks: List[PeriodicTask] = []

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def log_security_event(
        self,
        type: SecurityEventType,
        severity: SecuritySeverity,
        source: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> SecurityEvent:
        now = self.clock.now()
        event = SecurityEvent(
            id=generate_event_id(now),
            type=type,
            severity=severity,
            source=source,
            description=description,
            metadata=metadata or {},
            timestamp=now,
        )

        if context is not None:
            event.ip_address = context.ip_address
            event.user_agent = context.user_agent
            event.user_id = context.user_id
            event.organization_id = context.organization_id
            event.endpoint = context.endpoint

        self.repository.append(event)

        if event.severity in ALERT_SEVERITIES:
            try:
                self.alert_sink.create_alert(event)
            except Exception as e:
                logger.error(f"Alert sink failed for {event.id}: {e}")

        for callback in self._callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in security event callback: {e}")

        logger.warning(
            f"Security event [{event.severity.value.upper()}]: "
            f"{event.type.value} - {event.description}"
        )
        return event

    def on_security_event(self, callback: EventCallback) -> None:
        self._callbacks.append(callback)

    def get_security_events(
        self,
        type: Optional[SecurityEventType] = None,
        severity: Optional[SecuritySeverity] = None,
        resolved: Optional[bool] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        user_id: Optional[str] = None,
        organization_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[SecurityEvent]:
        """
        Filter stored events, newest first.

        All filters combine with AND; date bounds are inclusive. offset and
        limit apply after sorting.
        """
        events = self.repository.list_all()

        if type is not None:
            events = [e for e in events if e.type == type]
        if severity is not None:
            events = [e for e in events if e.severity == severity]
        if resolved is not None:
            events = [e for e in events if e.resolved == resolved]
        if start_date is not None:
            events = [e for e in events if e.timestamp >= start_date]
        if end_date is not None:
            events = [e for e in events if e.timestamp <= end_date]
        if user_id:
            events = [e for e in events if e.user_id == user_id]
        if organization_id:
            events = [e for e in events if e.organization_id == organization_id]
        if ip_address:
            events = [e for e in events if e.ip_address == ip_address]

        events.sort(key=lambda e: e.timestamp, reverse=True)

        if offset:
            events = events[offset:]
        if limit:
            events = events[:limit]
        return events

    def resolve_security_event(self, event_id: str) -> bool:
        event = self.repository.get_by_id(event_id)
        if event is None:
            return False
        event.resolve()
        return True

    def cleanup(self) -> int:
        """Drop events older than the retention window"""
        cutoff = self.clock.now() - timedelta(days=self.retention_days)
        removed = self.repository.delete_older_than(cutoff)
        if removed:
            logger.info(f"Security event cleanup removed {removed} events")
        return removed

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def generate_security_audit_report(
        self, start_date: datetime, end_date: datetime
    ) -> SecurityAuditReport:
        return self.reports.generate(start_date, end_date)

    def get_security_stats(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> SecurityStats:
        end_date = end_date or self.clock.now()
        start_date = start_date or end_date - ANALYSIS_WINDOW
        events = self.get_security_events(start_date=start_date, end_date=end_date)

        by_type = {t.value: 0 for t in SecurityEventType}
        by_severity = {s.value: 0 for s in SecuritySeverity}
        for event in events:
            by_type[event.type.value] += 1
            by_severity[event.severity.value] += 1

        ip_counts = Counter(e.ip_address for e in events if e.ip_address)
        endpoint_counts = Counter(e.endpoint for e in events if e.endpoint)

        return SecurityStats(
            total_events=len(events),
            events_by_type=by_type,
            events_by_severity=by_severity,
            recent_events=events[:10],
            top_ips=[CountByKey(key=k, count=c) for k, c in ip_counts.most_common(10)],
            top_endpoints=[
                CountByKey(key=k, count=c) for k, c in endpoint_counts.most_common(10)
            ],
            metrics=self.get_security_metrics(start_date, end_date),
        )

    def get_security_metrics(self, start_date: datetime, end_date: datetime) -> SecurityMetrics:
        """
        Blocked and hostile traffic in [start_date, end_date].

        A blocked request is a RATE_LIMIT_EXCEEDED, BRUTE_FORCE_ATTEMPT or
        UNAUTHORIZED_ACCESS event. Top blocked IPs count only those events;
        targeted endpoints count every event.
        """
        events = self.get_security_events(start_date=start_date, end_date=end_date)
        types = Counter(e.type for e in events)
        blocked = [e for e in events if e.type in BLOCKING_EVENT_TYPES]

        blocked_ips = Counter(e.ip_address for e in blocked if e.ip_address)
        endpoints = Counter(e.endpoint for e in events if e.endpoint)

        return SecurityMetrics(
            total_events=len(events),
            blocked_requests=len(blocked),
            rate_limit_violations=types[SecurityEventType.RATE_LIMIT_EXCEEDED],
            brute_force_attempts=types[SecurityEventType.BRUTE_FORCE_ATTEMPT],
            suspicious_activity=sum(types[t] for t in SUSPICIOUS_EVENT_TYPES),
            top_blocked_ips=[CountByKey(key=k, count=c) for k, c in blocked_ips.most_common(10)],
            top_targeted_endpoints=[
                CountByKey(key=k, count=c) for k, c in endpoints.most_common(10)
            ],
            period=ReportPeriod(start=start_date, end=end_date),
        )

    # ------------------------------------------------------------------
    # Pattern analysis
    # ------------------------------------------------------------------

    def analyze_suspicious_patterns(self) -> SuspiciousPatterns:
        recent = self.get_security_events(start_date=self.clock.now() - ANALYSIS_WINDOW)

        by_ip: Dict[str, List[SecurityEvent]] = defaultdict(list)
        by_user: Dict[str, List[SecurityEvent]] = defaultdict(list)
        for event in recent:
            if event.ip_address:
                by_ip[event.ip_address].append(event)
            if event.user_id:
                by_user[event.user_id].append(event)

        return SuspiciousPatterns(
            suspicious_ips=self._score_groups(by_ip),
            suspicious_users=self._score_groups(by_user),
            anomalies=self._detect_anomalies(recent),
        )

    def _score_groups(
        self, groups: Dict[str, List[SecurityEvent]]
    ) -> List[SuspiciousIdentifier]:
        scored = [
            SuspiciousIdentifier(
                identifier=identifier,
                event_count=len(events),
                risk_score=calculate_risk_score(identifier, events),
            )
            for identifier, events in groups.items()
        ]
        suspicious = [s for s in scored if s.risk_score > SUSPICIOUS_RISK_THRESHOLD]
        suspicious.sort(key=lambda s: s.risk_score, reverse=True)
        return suspicious

    def _detect_anomalies(self, events: List[SecurityEvent]) -> List[Anomaly]:
        hourly = Counter(e.timestamp.hour for e in events)
        average = sum(hourly.values()) / 24

        anomalies = []
        for hour, count in sorted(hourly.items()):
            if count > average * SPIKE_FACTOR:
                anomalies.append(
                    Anomaly(
                        type="ACTIVITY_SPIKE",
                        description=(
                            f"Unusual spike in security events at hour {hour}: "
                            f"{count} events (avg: {average:.1f})"
                        ),
                        severity="medium",
                    )
                )
        return anomalies

    def run_periodic_audit(self) -> List[SecurityEvent]:
        """Log a high-severity event for every identifier with risk > 80"""
        created = []
        try:
            patterns = self.analyze_suspicious_patterns()

            for ip in patterns.suspicious_ips:
                if ip.risk_score > AUTO_EVENT_RISK_THRESHOLD:
                    created.append(
                        self.log_security_event(
                            SecurityEventType.SUSPICIOUS_ACTIVITY,
                            SecuritySeverity.high,
                            "Automated Analysis",
                            f"Suspicious IP detected: {ip.identifier} "
                            f"(Risk Score: {ip.risk_score})",
                            {
                                "ip": ip.identifier,
                                "risk_score": ip.risk_score,
                                "event_count": ip.event_count,
                            },
                        )
                    )

            for user in patterns.suspicious_users:
                if user.risk_score > AUTO_EVENT_RISK_THRESHOLD:
                    created.append(
                        self.log_security_event(
                            SecurityEventType.SUSPICIOUS_ACTIVITY,
                            SecuritySeverity.high,
                            "Automated Analysis",
                            f"Suspicious user activity detected: {user.identifier} "
                            f"(Risk Score: {user.risk_score})",
                            {
                                "user_id": user.identifier,
                                "risk_score": user.risk_score,
                                "event_count": user.event_count,
                            },
                        )
                    )
        except Exception as e:
            logger.error(f"Error in periodic security audit: {e}")
        return created

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def schedule(self, scheduler: IScheduler, interval_seconds: int = 3600) -> None:
        self._tasks.append(
            scheduler.every("security-event-cleanup", interval_seconds, self.cleanup)
        )
        self._tasks.append(
            scheduler.every("security-pattern-analysis", interval_seconds, self.run_periodic_audit)
        )

    def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()
