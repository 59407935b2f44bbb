from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import src.domain  # noqa: F401  registers every table on SQLModel.metadata
from src.adapter.repositories.dashboard_repository import SqlAlchemyDashboardRepository
from src.adapter.services import BcryptPasswordHasher, InMemoryTTLCache, LocalDocumentStorage
from src.api.dependencies.auth import Principal, get_current_principal
from src.depends import (
    get_session,
    get_payment_gateway,
    get_document_storage,
    get_password_hasher,
    get_dashboard_repository,
    get_dashboard_cache,
)

TENANT_ID = "tenant_1"


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path):
    """File-backed SQLite database, created fresh for each test"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rental_test.db'}", echo=False, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a new database session for each test"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def principal():
    """Operator signed in to the test tenant"""
    return Principal(sub="staff_1", role="manager", tenant_id=TENANT_ID)


@pytest.fixture
def mock_gateway():
    """Payment processor double; tests set intent and refund responses"""
    gateway = MagicMock()
    gateway.retrieve_intent = AsyncMock()
    gateway.cancel_intent = AsyncMock()
    gateway.create_refund = AsyncMock()
    gateway.charge_off_session = AsyncMock()
    return gateway


def _build_app(db_session, session_factory, mock_gateway, tmp_path):
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    # Override the session dependency to use test session
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_payment_gateway] = lambda: mock_gateway
    app.dependency_overrides[get_document_storage] = lambda: LocalDocumentStorage(
        str(tmp_path / "documents"), "/documents"
    )
    app.dependency_overrides[get_password_hasher] = lambda: BcryptPasswordHasher(rounds=4)
    app.dependency_overrides[get_dashboard_repository] = lambda: SqlAlchemyDashboardRepository(session_factory)
    cache = InMemoryTTLCache(ttl_seconds=60)
    app.dependency_overrides[get_dashboard_cache] = lambda: cache
    return app


@pytest_asyncio.fixture
async def client(db_session, session_factory, mock_gateway, principal, tmp_path):
    """Authenticated test client with database and processor overrides"""
    app = _build_app(db_session, session_factory, mock_gateway, tmp_path)
    app.dependency_overrides[get_current_principal] = lambda: principal

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def anonymous_client(db_session, session_factory, mock_gateway, tmp_path):
    """Test client that goes through real bearer token checks"""
    app = _build_app(db_session, session_factory, mock_gateway, tmp_path)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
