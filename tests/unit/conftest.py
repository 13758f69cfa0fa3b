import pytest
from unittest.mock import AsyncMock, MagicMock

from src.adapter.repositories.api_key_repository import InMemoryApiKeyRepository
from src.adapter.repositories.security_event_repository import (
    InMemorySecurityEventRepository,
)
from src.adapter.services.memory_cache import MemoryCache
from src.app.services.api_key_manager import ApiKeyManager
from src.app.services.security_audit_service import SecurityAuditService
from tests.utils.fakes import (
    FrozenClock,
    ManualScheduler,
    RecordingAlertSink,
    TestConfig,
)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def alert_sink():
    return RecordingAlertSink()


@pytest.fixture
def config():
    return TestConfig()


@pytest.fixture
def audit(clock, alert_sink, config):
    return SecurityAuditService(
        InMemorySecurityEventRepository(), clock, alert_sink, config=config
    )


@pytest.fixture
def api_keys(clock):
    return ApiKeyManager(InMemoryApiKeyRepository(), clock)


@pytest.fixture
def cache(clock):
    return MemoryCache(clock, default_ttl=900)
