"""
Unit tests for SecurityAuditService (event store, stats, patterns, periodic audit)
"""

from datetime import timedelta

from src.adapter.repositories.security_event_repository import (
    InMemorySecurityEventRepository,
)
from src.app.services.security_audit_service import SecurityAuditService
from src.domain.entities import (
    RequestContext,
    SecurityEventType,
    SecuritySeverity,
)


def log(audit, type=SecurityEventType.INVALID_REQUEST, severity=SecuritySeverity.low, **context):
    return audit.log_security_event(
        type,
        severity,
        "test",
        "test event",
        context=RequestContext(**context) if context else None,
    )


def test_log_security_event_returns_stored_event(audit, clock):
    event = log(audit, ip_address="10.0.0.1", user_id="u1", endpoint="/login")

    assert event.id.startswith("sec_")
    assert event.timestamp == clock.now()
    assert event.resolved is False
    assert event.ip_address == "10.0.0.1"
    assert event.user_id == "u1"
    assert audit.repository.get_by_id(event.id) is event


def test_high_and_critical_events_are_alerted(audit, alert_sink):
    log(audit, severity=SecuritySeverity.low)
    log(audit, severity=SecuritySeverity.medium)
    high = log(audit, severity=SecuritySeverity.high)
    critical = log(audit, severity=SecuritySeverity.critical)

    assert alert_sink.alerts == [high, critical]


def test_failing_callback_does_not_break_logging(audit):
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    audit.on_security_event(broken)
    audit.on_security_event(seen.append)

    event = log(audit)

    assert seen == [event]
    assert audit.repository.count() == 1


def test_events_are_returned_newest_first(audit, clock):
    first = log(audit)
    clock.advance(seconds=1)
    second = log(audit)
    clock.advance(seconds=1)
    third = log(audit)

    assert [e.id for e in audit.get_security_events()] == [third.id, second.id, first.id]


def test_filters_combine_and_paginate(audit, clock):
    for i in range(5):
        log(audit, SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.medium, ip_address="1.1.1.1")
        clock.advance(seconds=1)
    log(audit, SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.high, ip_address="1.1.1.1")
    log(audit, SecurityEventType.MALICIOUS_REQUEST, SecuritySeverity.medium, ip_address="2.2.2.2")

    matching = audit.get_security_events(
        type=SecurityEventType.UNAUTHORIZED_ACCESS,
        severity=SecuritySeverity.medium,
        ip_address="1.1.1.1",
    )
    page = audit.get_security_events(
        type=SecurityEventType.UNAUTHORIZED_ACCESS,
        severity=SecuritySeverity.medium,
        limit=2,
        offset=1,
    )

    assert len(matching) == 5
    assert [e.id for e in page] == [e.id for e in matching[1:3]]


def test_date_bounds_are_inclusive(audit, clock):
    start = clock.now()
    inside = log(audit)
    clock.advance(hours=1)
    edge = log(audit)
    clock.advance(seconds=1)
    log(audit)

    events = audit.get_security_events(start_date=start, end_date=start + timedelta(hours=1))

    assert {e.id for e in events} == {inside.id, edge.id}


def test_store_evicts_oldest_beyond_cap(clock, alert_sink):
    audit = SecurityAuditService(InMemorySecurityEventRepository(max_events=10000), clock, alert_sink)

    first = log(audit)
    second = log(audit)
    for _ in range(9999):
        log(audit)

    assert audit.repository.count() == 10000
    assert audit.repository.get_by_id(first.id) is None
    assert audit.repository.get_by_id(second.id) is not None


def test_resolve_security_event(audit):
    event = log(audit)

    assert audit.resolve_security_event(event.id) is True
    assert audit.resolve_security_event(event.id) is True
    assert audit.get_security_events(resolved=True)[0].id == event.id
    assert audit.resolve_security_event("sec_unknown") is False


def test_cleanup_drops_events_past_retention(audit, clock):
    old = log(audit)
    clock.advance(days=20)
    recent = log(audit)
    clock.advance(days=11)

    removed = audit.cleanup()

    assert removed == 1
    assert audit.repository.get_by_id(old.id) is None
    assert audit.repository.get_by_id(recent.id) is not None


def test_security_stats_counts_recent_events(audit, clock):
    log(audit, SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.medium, ip_address="1.1.1.1", endpoint="/a")
    log(audit, SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.high, ip_address="1.1.1.1", endpoint="/b")
    log(audit, SecurityEventType.MALICIOUS_REQUEST, SecuritySeverity.high, ip_address="2.2.2.2", endpoint="/a")
    clock.advance(hours=1)

    stats = audit.get_security_stats()

    assert stats.total_events == 3
    assert stats.events_by_type["UNAUTHORIZED_ACCESS"] == 2
    assert stats.events_by_type["BRUTE_FORCE_ATTEMPT"] == 0
    assert stats.events_by_severity["high"] == 2
    assert stats.top_ips[0].key == "1.1.1.1"
    assert stats.top_ips[0].count == 2
    assert stats.top_endpoints[0].key == "/a"


def test_security_metrics_count_blocked_and_suspicious_traffic(audit, clock):
    start = clock.now()
    log(audit, SecurityEventType.RATE_LIMIT_EXCEEDED, ip_address="1.1.1.1", endpoint="/v1/organization")
    log(audit, SecurityEventType.RATE_LIMIT_EXCEEDED, ip_address="1.1.1.1", endpoint="/v1/organization")
    log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, ip_address="2.2.2.2", endpoint="/login")
    log(audit, SecurityEventType.UNAUTHORIZED_ACCESS, ip_address="2.2.2.2", endpoint="/v1/organization")
    log(audit, SecurityEventType.MALICIOUS_REQUEST, ip_address="3.3.3.3", endpoint="/search")
    log(audit, SecurityEventType.INVALID_REQUEST, ip_address="3.3.3.3", endpoint="/search")
    log(audit, SecurityEventType.API_ABUSE, ip_address="3.3.3.3", endpoint="/search")
    clock.advance(minutes=5)
    log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, ip_address="4.4.4.4")

    metrics = audit.get_security_metrics(start, start + timedelta(minutes=1))

    assert metrics.total_events == 7
    assert metrics.blocked_requests == 4
    assert metrics.rate_limit_violations == 2
    assert metrics.brute_force_attempts == 1
    assert metrics.suspicious_activity == 2
    assert sorted((c.key, c.count) for c in metrics.top_blocked_ips) == [("1.1.1.1", 2), ("2.2.2.2", 2)]
    assert metrics.top_targeted_endpoints[0].key == "/v1/organization"
    assert metrics.top_targeted_endpoints[0].count == 3
    assert metrics.period.start == start


def test_security_stats_include_metrics_for_same_period(audit, clock):
    log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, ip_address="5.5.5.5")

    stats = audit.get_security_stats()

    assert stats.metrics.brute_force_attempts == 1
    assert stats.metrics.period.end == clock.now()
    assert stats.metrics.period.start == clock.now() - timedelta(hours=24)


def test_patterns_flag_identifiers_above_threshold(audit):
    for _ in range(3):
        log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, SecuritySeverity.critical, ip_address="6.6.6.6", user_id="mallory")
    log(audit, ip_address="7.7.7.7", user_id="alice")

    patterns = audit.analyze_suspicious_patterns()

    assert [s.identifier for s in patterns.suspicious_ips] == ["6.6.6.6"]
    assert patterns.suspicious_ips[0].risk_score == 100
    assert patterns.suspicious_ips[0].event_count == 3
    assert [s.identifier for s in patterns.suspicious_users] == ["mallory"]


def test_patterns_ignore_events_older_than_a_day(audit, clock):
    for _ in range(3):
        log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, SecuritySeverity.critical, ip_address="6.6.6.6")
    clock.advance(hours=25)

    assert audit.analyze_suspicious_patterns().suspicious_ips == []


def test_patterns_report_hourly_spike(audit, clock):
    # 12 events in one hour against a 24h average of 0.5 per hour
    for _ in range(12):
        log(audit)

    anomalies = audit.analyze_suspicious_patterns().anomalies

    assert len(anomalies) == 1
    assert anomalies[0].type == "ACTIVITY_SPIKE"
    assert "hour 12" in anomalies[0].description


def test_periodic_audit_logs_high_risk_identifiers(audit, alert_sink):
    for _ in range(3):
        log(audit, SecurityEventType.BRUTE_FORCE_ATTEMPT, SecuritySeverity.critical, ip_address="6.6.6.6")

    created = audit.run_periodic_audit()

    assert len(created) == 1
    event = created[0]
    assert event.type == SecurityEventType.SUSPICIOUS_ACTIVITY
    assert event.severity == SecuritySeverity.high
    assert event.source == "Automated Analysis"
    assert event.metadata["ip"] == "6.6.6.6"
    assert event.metadata["risk_score"] == 100
    assert event in alert_sink.alerts


def test_periodic_audit_swallows_analysis_errors(audit, monkeypatch):
    def broken():
        raise RuntimeError("analysis failed")

    monkeypatch.setattr(audit, "analyze_suspicious_patterns", broken)

    assert audit.run_periodic_audit() == []


def test_schedule_registers_cleanup_and_analysis(audit, scheduler, clock):
    audit.schedule(scheduler, 3600)
    log(audit)
    clock.advance(days=31)

    assert set(scheduler.jobs) == {"security-event-cleanup", "security-pattern-analysis"}
    assert scheduler.jobs["security-event-cleanup"].seconds == 3600
    assert scheduler.run("security-event-cleanup") == 1

    audit.stop()
    assert scheduler.jobs == {}
