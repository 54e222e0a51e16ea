"""Tests for the sleep log validation schema."""

import math
from datetime import date

from sleep_log_server.schemas.sleep_log import (
    STAGE_SUM_MESSAGE,
    SleepLogInput,
    validate_sleep_log,
)
from tests.fixtures import sleep_log_payload


class TestValidateSleepLog:
    """Tests for validate_sleep_log."""

    def test_valid_record(self) -> None:
        result = validate_sleep_log(sleep_log_payload())

        assert isinstance(result, SleepLogInput)
        assert result.sleep_date == date(2024, 1, 1)
        assert result.sleep_duration == 450
        total = (
            result.deep_sleep_percentage
            + result.light_sleep_percentage
            + result.rem_sleep_percentage
        )
        assert total == 100

    def test_stage_sum_must_be_exactly_100(self) -> None:
        result = validate_sleep_log(sleep_log_payload(rem_sleep_percentage=19))

        assert result == [STAGE_SUM_MESSAGE]
        for field in ("deep_sleep_percentage", "light_sleep_percentage", "rem_sleep_percentage"):
            assert field in result[0]

    def test_date_format(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_date="2024/01/01"))

        assert result == ["sleep_date: must use YYYY-MM-DD format"]

    def test_impossible_calendar_date(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_date="2024-02-30"))

        assert isinstance(result, list)
        assert result[0].startswith("sleep_date:")

    def test_time_format(self) -> None:
        result = validate_sleep_log(sleep_log_payload(bed_time="7:00"))

        assert result == ["bed_time: must use HH:MM format"]

    def test_out_of_range_score(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_score=101))

        assert isinstance(result, list)
        assert len(result) == 1
        assert result[0].startswith("sleep_score:")

    def test_nan_is_rejected(self) -> None:
        result = validate_sleep_log(sleep_log_payload(deep_sleep_continuity=math.nan))

        assert isinstance(result, list)
        assert result[0].startswith("deep_sleep_continuity:")

    def test_duration_must_be_positive(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_duration=0))

        assert isinstance(result, list)
        assert result[0].startswith("sleep_duration:")

    def test_reports_every_field_violation(self) -> None:
        result = validate_sleep_log(
            sleep_log_payload(sleep_score=-1, wakeup_time="7am", wakeup_count=-2)
        )

        assert isinstance(result, list)
        fields = {message.split(":")[0] for message in result}
        assert fields == {"sleep_score", "wakeup_time", "wakeup_count"}

    def test_missing_field(self) -> None:
        payload = sleep_log_payload()
        del payload["sleep_score"]

        result = validate_sleep_log(payload)

        assert isinstance(result, list)
        assert result[0].startswith("sleep_score:")

    def test_numeric_strings_are_rejected(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_score="85", sleep_duration="450"))

        assert isinstance(result, list)
        fields = {message.split(":")[0] for message in result}
        assert fields == {"sleep_score", "sleep_duration"}

    def test_booleans_are_not_numbers(self) -> None:
        result = validate_sleep_log(sleep_log_payload(wakeup_count=True, deep_sleep_continuity=False))

        assert isinstance(result, list)
        fields = {message.split(":")[0] for message in result}
        assert fields == {"wakeup_count", "deep_sleep_continuity"}

    def test_fractional_wakeup_count_is_rejected(self) -> None:
        result = validate_sleep_log(sleep_log_payload(wakeup_count=1.5))

        assert isinstance(result, list)
        assert result[0].startswith("wakeup_count:")

    def test_int_and_float_numbers_accepted(self) -> None:
        result = validate_sleep_log(sleep_log_payload(sleep_score=85.5))

        assert isinstance(result, SleepLogInput)
        assert result.deep_sleep_percentage == 50.0
