import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ISmsSender(ABC):
    @abstractmethod
    async def send(self, phone_number: str, message: str) -> None:
        pass


class LoggingSmsSender(ISmsSender):
    """Development sender: writes the message to the log"""

    async def send(self, phone_number: str, message: str) -> None:
        masked = f"***{phone_number[-4:]}" if len(phone_number) >= 4 else "***"
        logger.info(f"SMS to {masked}: {message}")
