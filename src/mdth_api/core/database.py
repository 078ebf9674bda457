"""Async engine and session lifecycle for the accounts database.

SQLite (via aiosqlite) is the development and test backend; PostgreSQL (via
asyncpg) is used in deployment.  The API process initialises one engine in
its lifespan; CLI commands open a short-lived one with ``database_session``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None

_POOL_SIZE = 10
_MAX_OVERFLOW = 5


def get_engine() -> AsyncEngine:
    """Return the current async engine.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    if _engine is None:
        msg = "Database engine not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the current session factory.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    if _session_factory is None:
        msg = "Session factory not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return _session_factory


def _engine_options(database_url: str, options: dict[str, object]) -> dict[str, object]:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        options.setdefault("pool_size", _POOL_SIZE)
        options.setdefault("max_overflow", _MAX_OVERFLOW)
        options.setdefault("pool_pre_ping", True)
    elif url.database in (None, "", ":memory:"):
        # One shared connection, or every session would see its own empty database
        options.setdefault("poolclass", StaticPool)
    return options


def init_engine(database_url: str, **kwargs: object) -> AsyncEngine:
    """Create and store the async engine and session factory.

    Server databases get a sized pool with pre-ping; in-memory SQLite gets a
    single shared connection.

    Args:
        database_url: SQLAlchemy async connection string.
        **kwargs: Additional arguments passed to create_async_engine.

    Returns:
        The created async engine.
    """
    global _engine, _session_factory  # noqa: PLW0603
    _engine = create_async_engine(database_url, **_engine_options(database_url, dict(kwargs)))
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _engine


async def create_tables() -> None:
    """Create any missing tables for the registered models."""
    from mdth_api.models import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose of the async engine and release connections."""
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


@asynccontextmanager
async def database_session(database_url: str) -> AsyncIterator[AsyncSession]:
    """Open an engine for a one-off task and yield a session on it.

    The engine is disposed on exit, including on error.

    Args:
        database_url: SQLAlchemy async connection string.

    Yields:
        An AsyncSession bound to the new engine.
    """
    init_engine(database_url)
    try:
        async with get_session_factory()() as session:
            yield session
    finally:
        await dispose_engine()
