"""Account signup and login endpoints."""

from typing import Any

from litestar import Router, post
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED
from pydantic import BaseModel, Field

from sleep_log_server.core.auth import create_access_token
from sleep_log_server.core.database import DbSession
from sleep_log_server.services.users import UserService


class Credentials(BaseModel):
    """Username and password for signup and login."""

    username: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=6)


@post("/signup", status_code=HTTP_201_CREATED)
async def signup(data: Credentials, session: DbSession) -> dict[str, Any]:
    """Register a new account.

    Returns:
        Confirmation with the new user id (409 if the username is taken)
    """
    user = await UserService(session).create_user(data.username, data.password)
    return {"message": "Signup complete", "id": user.id}


@post("/login", status_code=HTTP_200_OK)
async def login(data: Credentials, session: DbSession) -> dict[str, Any]:
    """Exchange credentials for a bearer token.

    Returns:
        ``{"token": ..., "user": {"id": ..., "username": ...}}``
    """
    user = await UserService(session).authenticate(data.username, data.password)
    return {
        "token": create_access_token(user.id, user.username),
        "user": {"id": user.id, "username": user.username},
    }


auth_router = Router(path="/auth", route_handlers=[signup, login])
