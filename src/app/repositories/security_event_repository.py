from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import SecurityEvent


class ISecurityEventRepository(ABC):
    """SecurityEvent store interface - application layer"""

    @abstractmethod
    def append(self, event: SecurityEvent) -> SecurityEvent:
        """Append an event, evicting the oldest entries past capacity"""
        pass

    @abstractmethod
    def list_all(self) -> List[SecurityEvent]:
        """All stored events in insertion order"""
        pass

    @abstractmethod
    def get_by_id(self, event_id: str) -> Optional[SecurityEvent]:
        pass

    @abstractmethod
    def delete_older_than(self, cutoff: datetime) -> int:
        """Remove events with timestamp < cutoff. Returns count removed."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass
