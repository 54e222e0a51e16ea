"""Pydantic schemas for request validation."""

from sleep_log_server.schemas.sleep_log import (
    SleepLogInput,
    format_validation_errors,
    validate_sleep_log,
)

__all__ = [
    "SleepLogInput",
    "format_validation_errors",
    "validate_sleep_log",
]
