"""
Unit tests for the security audit report
"""

from datetime import timedelta

from config import DEFAULT_JWT_SECRET
from src.app.services.audit_report import detect_vulnerabilities, generate_recommendations
from src.domain.entities import SecurityEventType, SecuritySeverity
from tests.utils.events import make_event
from tests.utils.fakes import DEFAULT_NOW, TestConfig


def log_at(audit, clock, when, type, severity=SecuritySeverity.medium):
    clock.current = when
    return audit.log_security_event(type, severity, "test", "test event")


def test_report_summarizes_period(audit, clock):
    end = DEFAULT_NOW
    start = end - timedelta(days=7)
    log_at(audit, clock, start - timedelta(hours=1), SecurityEventType.MALICIOUS_REQUEST)
    log_at(audit, clock, start + timedelta(days=1), SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.critical)
    resolved = log_at(audit, clock, start + timedelta(days=2), SecurityEventType.UNAUTHORIZED_ACCESS, SecuritySeverity.high)
    log_at(audit, clock, start + timedelta(days=5), SecurityEventType.API_ABUSE, SecuritySeverity.low)
    audit.resolve_security_event(resolved.id)
    clock.current = end

    report = audit.generate_security_audit_report(start, end)

    assert report.id.startswith("audit_")
    assert report.generated_at == end
    assert report.period.start == start
    assert report.summary.total_events == 3
    assert report.summary.critical_events == 1
    assert report.summary.high_severity_events == 1
    assert report.summary.low_severity_events == 1
    assert report.summary.resolved_events == 1
    assert report.summary.unresolved_events == 2
    assert report.top_threats[0].type == SecurityEventType.UNAUTHORIZED_ACCESS
    assert report.top_threats[0].count == 2


def test_trend_compares_period_halves(audit, clock):
    end = DEFAULT_NOW
    start = end - timedelta(days=8)
    for day in (1, 2):
        log_at(audit, clock, start + timedelta(days=day), SecurityEventType.RATE_LIMIT_EXCEEDED)
    for day in (5, 6, 7):
        log_at(audit, clock, start + timedelta(days=day), SecurityEventType.RATE_LIMIT_EXCEEDED)
    for day in (1, 2, 3):
        log_at(audit, clock, start + timedelta(days=day), SecurityEventType.API_ABUSE)
    log_at(audit, clock, start + timedelta(days=6), SecurityEventType.API_ABUSE)
    log_at(audit, clock, start + timedelta(days=1), SecurityEventType.MALICIOUS_REQUEST)
    log_at(audit, clock, start + timedelta(days=6), SecurityEventType.MALICIOUS_REQUEST)
    log_at(audit, clock, start + timedelta(days=6), SecurityEventType.INVALID_REQUEST)
    clock.current = end

    trends = {t.type: t.trend for t in audit.generate_security_audit_report(start, end).top_threats}

    assert trends[SecurityEventType.RATE_LIMIT_EXCEEDED] == "increasing"
    assert trends[SecurityEventType.API_ABUSE] == "decreasing"
    assert trends[SecurityEventType.MALICIOUS_REQUEST] == "stable"
    # Nothing in the first half: no baseline to compare against
    assert trends[SecurityEventType.INVALID_REQUEST] == "stable"


def test_recommendations_follow_thresholds():
    events = (
        [make_event(SecurityEventType.RATE_LIMIT_EXCEEDED) for _ in range(101)]
        + [make_event(SecurityEventType.BRUTE_FORCE_ATTEMPT) for _ in range(50)]
        + [make_event(SecurityEventType.MALICIOUS_REQUEST) for _ in range(21)]
    )

    recommendations = generate_recommendations(events)

    assert [r.id for r in recommendations] == ["rec_rate_limit", "rec_input_validation"]
    assert recommendations[0].priority == "high"
    assert recommendations[0].action_items


def test_no_recommendations_for_quiet_period():
    assert generate_recommendations([]) == []


def test_default_jwt_secret_is_reported():
    class Config(TestConfig):
        JWT_SECRET = DEFAULT_JWT_SECRET

    vulnerabilities = detect_vulnerabilities(Config(), DEFAULT_NOW)

    assert [v.id for v in vulnerabilities] == ["vuln_auth_secret"]
    assert vulnerabilities[0].detected_at == DEFAULT_NOW


def test_plain_http_in_production_is_reported():
    class Config(TestConfig):
        ENVIRONMENT = "production"
        PUBLIC_URL = "http://security.example.com"

    vulnerabilities = detect_vulnerabilities(Config(), DEFAULT_NOW)

    assert [v.id for v in vulnerabilities] == ["vuln_https"]
    assert vulnerabilities[0].severity == "critical"


def test_safe_configuration_has_no_vulnerabilities():
    class Config(TestConfig):
        ENVIRONMENT = "production"
        PUBLIC_URL = "https://security.example.com"

    assert detect_vulnerabilities(Config(), DEFAULT_NOW) == []
    assert detect_vulnerabilities(None, DEFAULT_NOW) == []


def test_trend_counts_midpoint_event_once(audit, clock):
    end = DEFAULT_NOW
    start = end - timedelta(days=8)
    log_at(audit, clock, start + timedelta(days=1), SecurityEventType.API_ABUSE)
    log_at(audit, clock, start + timedelta(days=4), SecurityEventType.API_ABUSE)
    clock.current = end

    trends = {t.type: t.trend for t in audit.generate_security_audit_report(start, end).top_threats}

    # One event on each side, the midpoint belongs to the second half
    assert trends[SecurityEventType.API_ABUSE] == "stable"
