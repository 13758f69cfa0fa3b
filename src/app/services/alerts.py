import logging
from abc import ABC, abstractmethod

from src.domain.entities import SecurityEvent

logger = logging.getLogger(__name__)


class IAlertSink(ABC):
    """Output channel for high and critical security events"""

    @abstractmethod
    def create_alert(self, event: SecurityEvent) -> None:
        pass


class LoggingAlertSink(IAlertSink):
    def create_alert(self, event: SecurityEvent) -> None:
        logger.error(
            f"Security alert [{event.severity.value.upper()}]: "
            f"{event.type.value} - {event.description} (event_id={event.id})"
        )
