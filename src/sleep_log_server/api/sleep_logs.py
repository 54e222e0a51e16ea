"""Sleep log API endpoints (manual entry and browsing)."""

import re
from typing import Annotated, Any

from litestar import Router, delete, get, post, put
from litestar.exceptions import ValidationException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED

from sleep_log_server.core.auth import CurrentAuth
from sleep_log_server.core.config import settings
from sleep_log_server.core.database import DbSession
from sleep_log_server.schemas.sleep_log import SleepLogInput, validate_sleep_log
from sleep_log_server.services.sleep_logs import SleepLogService, month_bounds

MONTH_PATTERN = re.compile(r"\d{4}-\d{2}")


def parse_sleep_log_body(data: dict[str, Any]) -> SleepLogInput:
    """Validate a request body, raising a 400 listing every violation."""
    result = validate_sleep_log(data)
    if isinstance(result, list):
        raise ValidationException("Invalid sleep log", extra=result)
    return result


@post("/", status_code=HTTP_201_CREATED)
async def create_sleep_log(
    data: dict[str, Any],
    auth: CurrentAuth,
    session: DbSession,
) -> dict[str, Any]:
    """Record one night manually.

    Returns:
        Confirmation with the new id (409 if the date is already recorded)
    """
    payload = parse_sleep_log_body(data)
    sleep_log = await SleepLogService(session).create(auth.user_id, payload)
    return {"message": "Sleep log created", "id": sleep_log.id}


@get("/", status_code=HTTP_200_OK)
async def list_sleep_logs(
    auth: CurrentAuth,
    session: DbSession,
    month: Annotated[str | None, Parameter(query="month", default=None)] = None,
    page: Annotated[int, Parameter(query="page", default=1, ge=1)] = 1,
    limit: Annotated[int | None, Parameter(query="limit", default=None, ge=1)] = None,
    target_user_id: Annotated[int | None, Parameter(query="targetUserId", default=None)] = None,
) -> dict[str, Any]:
    """List sleep logs.

    With ``month=YYYY-MM`` returns that month oldest first; otherwise returns
    a page of records newest first.

    Example:
        GET /api/sleep_logs?month=2024-01
        GET /api/sleep_logs?page=2&limit=20&targetUserId=3
    """
    service = SleepLogService(session)
    user_id = await service.resolve_view_user_id(auth.user_id, target_user_id)

    if month is not None:
        if not MONTH_PATTERN.fullmatch(month):
            raise ValidationException("month must use YYYY-MM format")
        try:
            month_bounds(month)
        except ValueError as exc:
            raise ValidationException("month must be a valid calendar month") from exc

        sleep_logs = await service.list_month(user_id, month)
        return {
            "data": [sleep_log.to_dict() for sleep_log in sleep_logs],
            "meta": {"month": month, "total": len(sleep_logs)},
        }

    page_size = min(limit or settings.default_page_size, settings.max_page_size)
    result = await service.list_page(user_id, page, page_size)
    return {
        "data": [sleep_log.to_dict() for sleep_log in result.items],
        "meta": {
            "total": result.total,
            "page": result.page,
            "limit": result.limit,
            "total_pages": result.total_pages,
        },
    }


@get("/{sleep_log_id:int}", status_code=HTTP_200_OK)
async def get_sleep_log(
    sleep_log_id: int,
    auth: CurrentAuth,
    session: DbSession,
    target_user_id: Annotated[int | None, Parameter(query="targetUserId", default=None)] = None,
) -> dict[str, Any]:
    """Get one sleep log as a bare record."""
    service = SleepLogService(session)
    user_id = await service.resolve_view_user_id(auth.user_id, target_user_id)
    sleep_log = await service.get(user_id, sleep_log_id)
    return sleep_log.to_dict()


@put("/{sleep_log_id:int}", status_code=HTTP_200_OK)
async def update_sleep_log(
    sleep_log_id: int,
    data: dict[str, Any],
    auth: CurrentAuth,
    session: DbSession,
) -> dict[str, Any]:
    """Replace every field of one of the caller's sleep logs."""
    payload = parse_sleep_log_body(data)
    await SleepLogService(session).update(auth.user_id, sleep_log_id, payload)
    return {"message": "Sleep log updated"}


@delete("/{sleep_log_id:int}", status_code=HTTP_200_OK)
async def delete_sleep_log(
    sleep_log_id: int,
    auth: CurrentAuth,
    session: DbSession,
) -> dict[str, Any]:
    """Delete one of the caller's sleep logs."""
    await SleepLogService(session).delete(auth.user_id, sleep_log_id)
    return {"message": "Sleep log deleted"}


sleep_logs_router = Router(
    path="/sleep_logs",
    route_handlers=[
        create_sleep_log,
        list_sleep_logs,
        get_sleep_log,
        update_sleep_log,
        delete_sleep_log,
    ],
)
