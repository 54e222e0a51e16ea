"""User listing and profile visibility endpoints."""

from typing import Any

from litestar import Router, get, patch
from litestar.status_codes import HTTP_200_OK
from pydantic import BaseModel

from sleep_log_server.core.auth import CurrentAuth
from sleep_log_server.core.database import DbSession
from sleep_log_server.services.users import UserService


class VisibilityUpdate(BaseModel):
    """Request body for PATCH /users/me."""

    is_public: bool


@get("/", status_code=HTTP_200_OK)
async def list_users(session: DbSession) -> dict[str, Any]:
    """List every user with their public flag."""
    users = await UserService(session).list_users()
    return {"data": [user.to_public_dict() for user in users]}


@get("/{user_id:int}", status_code=HTTP_200_OK)
async def get_user(user_id: int, session: DbSession) -> dict[str, Any]:
    """Get one user (404 if missing)."""
    user = await UserService(session).get_user(user_id)
    return {"data": user.to_public_dict()}


@patch("/me", status_code=HTTP_200_OK)
async def update_visibility(
    data: VisibilityUpdate,
    auth: CurrentAuth,
    session: DbSession,
) -> dict[str, Any]:
    """Let other users view the caller's data, or stop them."""
    user = await UserService(session).set_visibility(auth.user_id, data.is_public)
    return {"data": user.to_public_dict()}


users_router = Router(path="/users", route_handlers=[list_users, get_user, update_visibility])
