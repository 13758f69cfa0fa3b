from abc import ABC, abstractmethod
from typing import Any, Callable

# Plain function or coroutine function
Job = Callable[[], Any]


class PeriodicTask(ABC):
    """Handle to a recurring job; cancel() stops further runs"""

    name: str

    @abstractmethod
    def cancel(self) -> None:
        pass


class IScheduler(ABC):
    """Runs callables at a fixed interval until cancelled"""

    @abstractmethod
    def every(self, name: str, seconds: int, func: Job) -> PeriodicTask:
        """Schedule func every `seconds`; a job with the same name is replaced"""
        pass

    @abstractmethod
    def start(self) -> None:
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Cancel every job and stop the scheduler"""
        pass
