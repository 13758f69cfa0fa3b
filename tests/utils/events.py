from datetime import datetime
from typing import Optional

from src.domain.entities import SecurityEvent, SecurityEventType, SecuritySeverity
from src.domain.entities.security_event import generate_event_id
from tests.utils.fakes import DEFAULT_NOW


def make_event(
    type: SecurityEventType = SecurityEventType.INVALID_REQUEST,
    severity: SecuritySeverity = SecuritySeverity.low,
    timestamp: Optional[datetime] = None,
    ip_address: Optional[str] = None,
    user_id: Optional[str] = None,
) -> SecurityEvent:
    timestamp = timestamp or DEFAULT_NOW
    return SecurityEvent(
        id=generate_event_id(timestamp),
        type=type,
        severity=severity,
        source="test",
        description="test event",
        timestamp=timestamp,
        ip_address=ip_address,
        user_id=user_id,
    )
