"""
Risk Scorer

Pure scoring of an event subset for one identifier (IP address or user).
"""

from typing import Iterable

from src.domain.entities import SecurityEvent, SecurityEventType, SecuritySeverity

MAX_RISK_SCORE = 100

SEVERITY_WEIGHTS = {
    SecuritySeverity.critical: 25,
    SecuritySeverity.high: 15,
    SecuritySeverity.medium: 10,
    SecuritySeverity.low: 5,
}

TYPE_WEIGHTS = {
    SecurityEventType.BRUTE_FORCE_ATTEMPT: 20,
    SecurityEventType.MALICIOUS_REQUEST: 15,
    SecurityEventType.UNAUTHORIZED_ACCESS: 10,
    SecurityEventType.RATE_LIMIT_EXCEEDED: 5,
}

# (event count must exceed, bonus); bonuses are cumulative
FREQUENCY_BONUSES = ((10, 20), (50, 30), (100, 50))


def calculate_risk_score(identifier: str, events: Iterable[SecurityEvent]) -> int:
    """
    Score the events attributed to `identifier` on a 0-100 scale.

    Sums severity weights and type weights over every event, adds the
    frequency bonuses, and clamps to 100. There is no time decay: the
    caller picks the window by choosing which events to pass.
    """
    events = list(events)
    score = 0

    for event in events:
        score += SEVERITY_WEIGHTS.get(event.severity, 0)
        score += TYPE_WEIGHTS.get(event.type, 0)

    for threshold, bonus in FREQUENCY_BONUSES:
        if len(events) > threshold:
            score += bonus

    return min(score, MAX_RISK_SCORE)
