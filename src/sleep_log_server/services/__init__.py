"""Application services."""

from sleep_log_server.services.csv_import import CsvImportService, ImportOutcome
from sleep_log_server.services.sleep_logs import SleepLogService
from sleep_log_server.services.statistics import DashboardService
from sleep_log_server.services.users import UserService

__all__ = [
    "CsvImportService",
    "DashboardService",
    "ImportOutcome",
    "SleepLogService",
    "UserService",
]
