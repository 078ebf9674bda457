"""Shared test fixtures for async database, sessions, services, HTTP client, and auth tokens."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mdth_api.core.config import Settings, get_settings
from mdth_api.core.dependencies import get_async_session
from mdth_api.core.security import TokenClaims, TokenService, hash_password
from mdth_api.main import register_exception_handlers
from mdth_api.models.base import Base
from mdth_api.models.user import User
from mdth_api.services.account_service import AccountService
from mdth_api.services.user_store import UserStore

TEST_SECRET = "test-secret-key-not-for-production-use"


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret_key=TEST_SECRET,
        jwt_algorithm="HS256",
        jwt_expire_hours=24,
        cors_origins="*",
        api_prefix="/api",
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def async_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession]:
    """Create a per-test async session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(async_session: AsyncSession) -> UserStore:
    return UserStore(async_session)


@pytest.fixture
def token_service(settings: Settings) -> TokenService:
    return TokenService(settings.jwt_secret_key, settings.jwt_algorithm, settings.jwt_expire_hours)


@pytest.fixture
def account_service(store: UserStore, token_service: TokenService) -> AccountService:
    return AccountService(store, token_service)


async def _insert_user(session: AsyncSession, **fields: object) -> User:
    user = User(**fields)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def admin_user(async_session: AsyncSession) -> User:
    """Create an active admin user in the test database."""
    return await _insert_user(
        async_session,
        username="testadmin",
        email="admin@mdth.io",
        hashed_password=hash_password("adminpass123"),
        full_name="Test Admin",
        role="admin",
    )


@pytest.fixture
async def regular_user(async_session: AsyncSession) -> User:
    """Create an active non-admin user in the test database."""
    return await _insert_user(
        async_session,
        username="testuser",
        email="user@mdth.io",
        hashed_password=hash_password("userpass123"),
        full_name="Test User",
    )


def make_token(token_service: TokenService, user: User) -> str:
    """Issue a token for ``user`` the same way login does."""
    return token_service.issue(TokenClaims(user_id=str(user.id), username=user.username, email=user.email))


@pytest.fixture
def admin_token(token_service: TokenService, admin_user: User) -> str:
    return make_token(token_service, admin_user)


@pytest.fixture
def user_token(token_service: TokenService, regular_user: User) -> str:
    return make_token(token_service, regular_user)


@pytest.fixture
def app(settings: Settings, session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    """Accounts app wired to the in-memory database and test settings."""
    from mdth_api.api.router import create_router, setup_middleware

    async def _session() -> AsyncGenerator[AsyncSession]:
        async with session_factory() as session:
            yield session

    _app = FastAPI()
    register_exception_handlers(_app)
    setup_middleware(_app, settings)
    _app.include_router(create_router(settings))
    _app.dependency_overrides[get_async_session] = _session
    _app.dependency_overrides[get_settings] = lambda: settings
    return _app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
