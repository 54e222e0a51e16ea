"""JWT bearer authentication for user requests.

Tokens are issued at login and carry the user id in ``sub``. A guard
validates the token on protected routers and stores an explicit
:class:`AuthContext` in connection state; handlers receive it through the
``auth`` dependency and pass it on to services.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from litestar.connection import ASGIConnection, Request
from litestar.di import NamedDependency, Provide
from litestar.exceptions import NotAuthorizedException
from litestar.handlers import BaseRouteHandler

from sleep_log_server.core.config import settings

logger = logging.getLogger(__name__)

# Connection state key for storing the validated token context
AUTH_STATE_KEY = "auth_context"


@dataclass(frozen=True)
class AuthContext:
    """Identity extracted from a validated access token."""

    user_id: int
    username: str


def create_access_token(
    user_id: int,
    username: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for a user.

    Args:
        user_id: Database id of the user (stored as ``sub``)
        username: Username, included for display purposes
        expires_delta: Token validity period (default: settings.jwt_expiry_days)

    Returns:
        Encoded JWT string
    """
    expire = datetime.now(UTC) + (expires_delta or timedelta(days=settings.jwt_expiry_days))
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "exp": expire,
    }
    return jwt.encode(payload, settings.get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> AuthContext:
    """Validate an access token and return its identity.

    Raises:
        NotAuthorizedException: If the token is expired, tampered with or malformed
    """
    try:
        payload = jwt.decode(token, settings.get_jwt_secret(), algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as exc:
        raise NotAuthorizedException("Access token has expired") from exc
    except JWTError as exc:
        raise NotAuthorizedException("Invalid access token") from exc

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise NotAuthorizedException("Access token missing user id") from exc

    return AuthContext(user_id=user_id, username=str(payload.get("username", "")))


def _extract_bearer_token(connection: ASGIConnection[Any, Any, Any, Any]) -> str | None:
    """Extract the bearer token from the Authorization header."""
    auth_header = connection.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


async def jwt_auth_guard(
    connection: ASGIConnection[Any, Any, Any, Any], _: BaseRouteHandler
) -> None:
    """Litestar guard that requires a valid bearer token.

    Args:
        connection: The ASGI connection
        _: The route handler (unused)

    Raises:
        NotAuthorizedException: If the token is missing or invalid
    """
    token = _extract_bearer_token(connection)

    if not token:
        logger.warning("API request without authentication")
        raise NotAuthorizedException("Missing bearer token. Use the Authorization header.")

    context = decode_access_token(token)
    connection.state[AUTH_STATE_KEY] = context

    logger.debug(f"Access token validated: user_id={context.user_id}")


def provide_auth_context(request: Request[Any, Any, Any]) -> AuthContext:
    """Dependency returning the context stored by :func:`jwt_auth_guard`."""
    context = request.state.get(AUTH_STATE_KEY)
    if context is None:
        raise NotAuthorizedException("Authentication required")
    return context


# Shared dependency mapping for guarded routers
auth_dependencies = {"auth": Provide(provide_auth_context, sync_to_thread=False)}

# Handler parameter type for the ``auth`` dependency
CurrentAuth = NamedDependency[AuthContext]
