"""Shared test fixtures."""

import os

# Settings are read at import time; point them at throwaway values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-not-for-production")

from collections.abc import AsyncIterator  # noqa: E402

import pytest  # noqa: E402
from litestar.testing import AsyncTestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from sleep_log_server.app import create_app  # noqa: E402
from sleep_log_server.core.auth import create_access_token  # noqa: E402
from sleep_log_server.core.password import hash_password  # noqa: E402
from sleep_log_server.models.base import Base  # noqa: E402
from sleep_log_server.models.user import User  # noqa: E402

TEST_PASSWORD = "sleepwell123"


@pytest.fixture
async def async_engine():
    """Create async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncIterator[AsyncSession]:
    """Create async session for testing."""
    async_session_maker = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session


async def _create_user(session: AsyncSession, username: str, is_public: bool = False) -> User:
    user = User(
        username=username,
        password_hash=hash_password(TEST_PASSWORD),
        is_public=is_public,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def test_user(async_session: AsyncSession) -> User:
    """Create a private test user."""
    return await _create_user(async_session, "alice")


@pytest.fixture
async def test_user_2(async_session: AsyncSession) -> User:
    """Create a second private test user."""
    return await _create_user(async_session, "bob")


@pytest.fixture
async def public_user(async_session: AsyncSession) -> User:
    """Create a user whose data others may view."""
    return await _create_user(async_session, "carol", is_public=True)


def bearer_headers(user: User) -> dict[str, str]:
    """Authorization header carrying a fresh token for a user."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.username)}"}


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    """Authorization header for test_user."""
    return bearer_headers(test_user)


@pytest.fixture
async def client(async_engine) -> AsyncIterator[AsyncTestClient]:
    """Create test client bound to the test database."""
    async with AsyncTestClient(app=create_app(async_engine)) as test_client:
        yield test_client
