"""Database models."""

from sleep_log_server.models.base import Base
from sleep_log_server.models.sleep_log import SleepLog
from sleep_log_server.models.user import User

__all__ = [
    "Base",
    "SleepLog",
    "User",
]
