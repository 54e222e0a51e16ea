"""Dashboard API endpoints (statistics and weekday averages)."""

from typing import Annotated, Any

from litestar import Router, get
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK

from sleep_log_server.core.auth import CurrentAuth
from sleep_log_server.core.database import DbSession
from sleep_log_server.services.sleep_logs import SleepLogService
from sleep_log_server.services.statistics import DashboardService


@get("/statistics", status_code=HTTP_200_OK)
async def get_statistics(
    auth: CurrentAuth,
    session: DbSession,
    target_user_id: Annotated[int | None, Parameter(query="targetUserId", default=None)] = None,
) -> dict[str, Any]:
    """Whole-history statistics with trend slopes.

    Returns:
        ``{"data": {...}}``, or ``{"data": null}`` when there are no records

    Example:
        GET /api/dashboard/statistics?targetUserId=3
    """
    user_id = await SleepLogService(session).resolve_view_user_id(auth.user_id, target_user_id)
    statistics = await DashboardService(session).get_statistics(user_id)
    return {"data": statistics.to_dict() if statistics else None}


@get("/weekly", status_code=HTTP_200_OK)
async def get_weekly(
    auth: CurrentAuth,
    session: DbSession,
    target_user_id: Annotated[int | None, Parameter(query="targetUserId", default=None)] = None,
) -> dict[str, Any]:
    """Averages per day of week (0=Sunday), weekdays without records omitted."""
    user_id = await SleepLogService(session).resolve_view_user_id(auth.user_id, target_user_id)
    weekly = await DashboardService(session).get_weekly(user_id)
    return {"data": [group.to_dict() for group in weekly]}


dashboard_router = Router(path="/dashboard", route_handlers=[get_statistics, get_weekly])
