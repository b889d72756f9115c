import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.token_issuer import TokenIssuer, TokenSettings
from src.app.use_cases.rbac import SeedSystemRolesUseCase
from src.depends import get_unit_of_work
from tests.fixtures.json_loader import FixtureData


class IntegrationConfig(ApplicationConfig):
    JWT_SECRET = "integration-test-secret"
    ADMIN_API_KEY = "test-admin-key-12345"
    BCRYPT_ROUNDS = 4
    MAX_DEVICES = 2
    INACTIVITY_TIMEOUT_MINUTES = 30
    CORS_ORIGINS = []


@pytest_asyncio.fixture
def test_data():
    return FixtureData()


@pytest_asyncio.fixture
def token_issuer():
    """Signs tokens exactly as the app under test does"""
    return TokenIssuer(TokenSettings.from_config(IntegrationConfig))


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", connect_args={"timeout": 30}
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        await SeedSystemRolesUseCase(SqlAlchemyUnitOfWork(session)).execute()
    return Session


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    from src.api.app import create_app

    app = create_app(IntegrationConfig)

    # One database session per request, like the production dependency
    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
