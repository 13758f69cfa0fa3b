from abc import ABC, abstractmethod
from datetime import UTC, datetime


class Clock(ABC):
    """Source of the current instant (timezone-aware, UTC)"""

    @abstractmethod
    def now(self) -> datetime:
        pass

    def timestamp(self) -> float:
        return self.now().timestamp()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)
