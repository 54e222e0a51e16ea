"""API routes."""

from litestar import Router

from sleep_log_server.api.auth import auth_router
from sleep_log_server.api.csv_files import csv_router
from sleep_log_server.api.dashboard import dashboard_router
from sleep_log_server.api.health import health_router
from sleep_log_server.api.sleep_logs import sleep_logs_router
from sleep_log_server.api.users import users_router
from sleep_log_server.core.auth import auth_dependencies, jwt_auth_guard
from sleep_log_server.core.config import settings

# User data endpoints, all behind the bearer token guard
_protected_routers = [
    sleep_logs_router,
    dashboard_router,
    csv_router,
    users_router,
]

protected_router = Router(
    path="/",
    route_handlers=_protected_routers,
    guards=[jwt_auth_guard],
    dependencies=auth_dependencies,
)

api_router = Router(path=settings.api_prefix, route_handlers=[auth_router, protected_router])

# Export: health (root, plus /api/check), api (prefixed)
# - health_router: /health and /api/check - no auth needed
# - api_router: /api/auth/* open, everything else guarded
api_routers = [health_router, api_router]

__all__ = ["api_routers"]
