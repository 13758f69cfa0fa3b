from datetime import datetime
from typing import List, Optional

from src.app.repositories.security_event_repository import ISecurityEventRepository
from src.domain.entities import SecurityEvent

DEFAULT_MAX_EVENTS = 10000


class InMemorySecurityEventRepository(ISecurityEventRepository):
    """
    Process-local event store.

    Holds at most `max_events` events; each append past the cap drops
    the oldest entries (insertion order), independent of the retention sweep.
    """

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS):
        self.max_events = max_events
        self._events: List[SecurityEvent] = []

    def append(self, event: SecurityEvent) -> SecurityEvent:
        self._events.append(event)
        overflow = len(self._events) - self.max_events
        if overflow > 0:
            del self._events[:overflow]
        return event

    def list_all(self) -> List[SecurityEvent]:
        return list(self._events)

    def get_by_id(self, event_id: str) -> Optional[SecurityEvent]:
        return next((e for e in self._events if e.id == event_id), None)

    def delete_older_than(self, cutoff: datetime) -> int:
        before = len(self._events)
        self._events = [e for e in self._events if e.timestamp >= cutoff]
        return before - len(self._events)

    def count(self) -> int:
        return len(self._events)
