from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from src.depends import get_unit_of_work
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.adapter.services.runtime import SecurityRuntime
from src.api.utils.jwt import generate_jwt
from tests.utils.fakes import FrozenClock, ManualScheduler, RecordingSmsSender, TestConfig


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def sms_sender():
    return RecordingSmsSender()


@pytest.fixture
def runtime(sms_sender):
    return SecurityRuntime(
        TestConfig(),
        clock=FrozenClock(),
        scheduler=ManualScheduler(),
        sms_sender=sms_sender,
    )


@pytest_asyncio.fixture
async def client(db_session, runtime):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig, runtime=runtime)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def tenant_id():
    return uuid4()


@pytest.fixture
def auth_headers(tenant_id):
    """Bearer headers for a user of `tenant_id` (a fresh user per call)"""

    def make(role: str = "owner", user_id=None, tenant=None):
        token = generate_jwt(user_id or uuid4(), tenant or tenant_id, role)
        return {"Authorization": f"Bearer {token}"}

    return make
