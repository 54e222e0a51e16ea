"""Test fixtures for sleep-log-server."""

from tests.fixtures.sleep_seed import (
    fixed_csv,
    fixed_row,
    make_sleep_log,
    seed_sleep_logs,
    sleep_log_payload,
)

__all__ = [
    "fixed_csv",
    "fixed_row",
    "make_sleep_log",
    "seed_sleep_logs",
    "sleep_log_payload",
]
