"""Litestar application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from advanced_alchemy.extensions.litestar import (
    AsyncSessionConfig,
    SQLAlchemyAsyncConfig,
    SQLAlchemyPlugin,
)
from litestar import Litestar
from litestar.config.cors import CORSConfig
from litestar.openapi import OpenAPIConfig
from sqlalchemy.ext.asyncio import AsyncEngine

from sleep_log_server import __version__
from sleep_log_server.api import api_routers
from sleep_log_server.core.config import settings
from sleep_log_server.core.database import close_database, engine, init_database

logging.basicConfig(format="%(message)s", level=settings.log_level)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def create_app(engine_instance: AsyncEngine | None = None) -> Litestar:
    """Create Litestar application.

    Args:
        engine_instance: Database engine to use (defaults to the global engine)

    Returns:
        Configured Litestar app instance
    """
    db_engine = engine_instance or engine

    @asynccontextmanager
    async def lifespan(app: Litestar) -> AsyncIterator[None]:
        """Check the database schema on startup and close the pool on shutdown."""
        logger.info("Starting sleep-log-server", version=__version__)

        await init_database(db_engine)

        yield

        # A caller-supplied engine is owned by the caller
        if engine_instance is None:
            await close_database(db_engine)
        logger.info("Shutdown complete")

    return Litestar(
        route_handlers=api_routers,
        lifespan=[lifespan],
        openapi_config=OpenAPIConfig(
            title="sleep-log-server API",
            version=__version__,
            description="Personal sleep log tracking with CSV import and dashboards",
        ),
        cors_config=CORSConfig(allow_origins=settings.cors_allow_origins),
        plugins=[
            SQLAlchemyPlugin(
                config=SQLAlchemyAsyncConfig(
                    engine_instance=db_engine,
                    session_dependency_key="session",
                    session_config=AsyncSessionConfig(expire_on_commit=False),
                ),
            ),
        ],
        debug=settings.log_level == "DEBUG",
    )


# Application instance
app = create_app()
