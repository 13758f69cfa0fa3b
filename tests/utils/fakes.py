from datetime import UTC, datetime, timedelta
from typing import Callable, Dict, List, Optional

from src.app.services.alerts import IAlertSink
from src.app.services.clock import Clock
from src.app.services.scheduler import IScheduler, PeriodicTask
from src.app.services.sms_sender import ISmsSender
from src.domain.entities import SecurityEvent

DEFAULT_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)


class FrozenClock(Clock):
    def __init__(self, now: Optional[datetime] = None):
        self.current = now or DEFAULT_NOW

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class ManualTask(PeriodicTask):
    def __init__(self, scheduler: "ManualScheduler", name: str, seconds: int, func: Callable):
        self.scheduler = scheduler
        self.name = name
        self.seconds = seconds
        self.func = func

    def cancel(self) -> None:
        self.scheduler.jobs.pop(self.name, None)


class ManualScheduler(IScheduler):
    """Jobs only run when the test calls run()"""

    def __init__(self):
        self.jobs: Dict[str, ManualTask] = {}
        self.started = False

    def every(self, name: str, seconds: int, func: Callable) -> PeriodicTask:
        task = ManualTask(self, name, seconds, func)
        self.jobs[name] = task
        return task

    def start(self) -> None:
        self.started = True

    def shutdown(self) -> None:
        self.jobs.clear()
        self.started = False

    def run(self, name: str):
        return self.jobs[name].func()


class RecordingAlertSink(IAlertSink):
    def __init__(self):
        self.alerts: List[SecurityEvent] = []

    def create_alert(self, event: SecurityEvent) -> None:
        self.alerts.append(event)


class RecordingSmsSender(ISmsSender):
    def __init__(self):
        self.messages: List[tuple] = []

    async def send(self, phone_number: str, message: str) -> None:
        self.messages.append((phone_number, message))


class TestConfig:
    """Minimal settings object; attributes mirror ApplicationConfig"""

    __test__ = False

    ENVIRONMENT = "dev"
    PUBLIC_URL = "http://localhost:8000"
    JWT_SECRET = "a-long-random-test-secret"
    ENCRYPTION_MASTER_KEY = ""
    CACHE_BACKEND = "memory"
    CACHE_DEFAULT_TTL = 900
    REDIS_URL = "redis://localhost:6379/0"
    SECURITY_EVENT_RETENTION_DAYS = 30
    SECURITY_EVENT_MAX_EVENTS = 10000
    SECURITY_AUDIT_INTERVAL_SECONDS = 3600
    API_KEY_USAGE_RETENTION_DAYS = 30
    API_KEY_DEFAULT_RATE_LIMIT = 1000
    API_KEY_DEFAULT_RATE_WINDOW_SECONDS = 3600
    IP_BLOCK_DEFAULT_SECONDS = 3600
    DDOS_REQUESTS_PER_MINUTE = 100
    MFA_SMS_CODE_TTL = 300
    MFA_MAX_ATTEMPTS = 5
    MFA_ATTEMPT_WINDOW_SECONDS = 900
    CORS_ORIGINS = []
    CORS_ALLOW_CREDENTIALS = True
