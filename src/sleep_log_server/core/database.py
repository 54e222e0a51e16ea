"""Database initialization and session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from litestar.di import NamedDependency
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from sleep_log_server.core.config import settings

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("users", "sleep_logs")

# Request-scoped session injected by the SQLAlchemy plugin
DbSession = NamedDependency[AsyncSession]


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async database engine.

    PostgreSQL gets a connection pool; SQLite (local runs and tests) shares a
    single connection so in-memory databases survive across sessions.

    Args:
        database_url: Override for settings.database_url

    Returns:
        Async SQLAlchemy engine
    """
    url = database_url or settings.database_url

    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_async_engine(
        url,
        echo=False,
        pool_size=10,
        max_overflow=20,
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


# Global engine and session maker
engine = create_engine()
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_database(db_engine: AsyncEngine | None = None) -> None:
    """Verify the database is reachable and the schema is in place.

    Does NOT create tables - use Alembic migrations for schema management.

    Args:
        db_engine: Engine to check (defaults to the global engine)
    """
    db_engine = db_engine or engine

    async with db_engine.connect() as conn:
        table_names = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())

    missing = [name for name in REQUIRED_TABLES if name not in table_names]
    if missing:
        logger.warning(
            f"Database tables missing: {', '.join(missing)}. "
            "Run 'alembic upgrade head' to initialize the database schema."
        )
    else:
        logger.info("Database schema verified")


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session.

    Usage:
        async with get_session() as session:
            result = await session.execute(select(SleepLog))
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_database(db_engine: AsyncEngine | None = None) -> None:
    """Close database connection pool."""
    await (db_engine or engine).dispose()
