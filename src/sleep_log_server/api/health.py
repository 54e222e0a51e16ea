"""Health check endpoints."""

import logging
from typing import Any

from litestar import Router, get
from litestar.response import Response
from litestar.status_codes import HTTP_200_OK, HTTP_500_INTERNAL_SERVER_ERROR
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sleep_log_server import __version__
from sleep_log_server.core.database import DbSession

logger = logging.getLogger(__name__)


@get("/health", status_code=HTTP_200_OK, sync_to_thread=False)
def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Status and version information
    """
    return {
        "status": "ok",
        "version": __version__,
    }


@get("/api/check", status_code=HTTP_200_OK)
async def database_check(session: DbSession) -> Response[dict[str, Any]]:
    """Check that the database answers a trivial query.

    Returns:
        ``{"status": "success", "result": 1}`` or a 500 with the error
    """
    try:
        result = await session.execute(text("SELECT 1"))
        value = result.scalar_one()
    except SQLAlchemyError as exc:
        logger.error(f"Database check failed: {exc}")
        return Response(
            content={"status": "error", "error": str(exc)},
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return Response(
        content={"status": "success", "message": "Database connection OK", "result": value},
        status_code=HTTP_200_OK,
    )


health_router = Router(path="/", route_handlers=[health_check, database_check])
