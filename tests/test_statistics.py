"""Tests for dashboard aggregation."""

from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.models.user import User
from sleep_log_server.services.statistics import (
    DashboardService,
    compute_statistics,
    compute_weekly,
    day_of_week,
    fold_bed_time_minutes,
    format_minutes_as_clock,
    linear_trend_slope,
    summarize,
    wake_time_minutes,
)
from tests.fixtures import make_sleep_log, seed_sleep_logs


class TestLinearTrendSlope:
    """Tests for linear_trend_slope."""

    def test_increasing_sequence(self) -> None:
        assert linear_trend_slope([1, 2, 3, 4, 5]) == pytest.approx(1.0)

    def test_constant_sequence(self) -> None:
        assert linear_trend_slope([5, 5, 5, 5]) == pytest.approx(0.0)

    def test_single_point(self) -> None:
        assert linear_trend_slope([7]) == 0.0

    def test_empty(self) -> None:
        assert linear_trend_slope([]) == 0.0

    def test_decreasing_sequence(self) -> None:
        assert linear_trend_slope([10, 8, 6, 4]) == pytest.approx(-2.0)


class TestTimeFolding:
    """Tests for bed and wake time conversion."""

    def test_early_morning_bed_time_is_folded(self) -> None:
        assert fold_bed_time_minutes("00:30") == 24 * 60 + 30
        assert fold_bed_time_minutes("14:59") == 24 * 60 + 14 * 60 + 59

    def test_evening_bed_time_is_not_folded(self) -> None:
        assert fold_bed_time_minutes("23:45") == 23 * 60 + 45
        assert fold_bed_time_minutes("15:00") == 15 * 60

    def test_wake_time_is_plain(self) -> None:
        assert wake_time_minutes("07:15") == 435

    def test_format_minutes_as_clock(self) -> None:
        assert format_minutes_as_clock(1447.5) == "00:08"
        assert format_minutes_as_clock(435) == "07:15"


class TestComputeStatistics:
    """Tests for compute_statistics."""

    def test_no_records(self) -> None:
        assert compute_statistics([]) is None

    def test_summary_fields(self) -> None:
        summary = summarize([80, 90, 70])

        assert summary.minimum == 70
        assert summary.maximum == 90
        assert summary.mean == 80
        assert summary.count == 3

    def test_statistics_over_records(self) -> None:
        records = [
            make_sleep_log(1, date(2024, 1, 1), sleep_score=70.0, bed_time="23:30", wakeup_count=1),
            make_sleep_log(1, date(2024, 1, 2), sleep_score=80.0, bed_time="00:30", wakeup_count=2),
            make_sleep_log(1, date(2024, 1, 3), sleep_score=90.0, bed_time="00:00", wakeup_count=3),
        ]

        statistics = compute_statistics(records)

        assert statistics is not None
        assert statistics.count == 3
        assert statistics.fields["sleep_score"].minimum == 70
        assert statistics.fields["sleep_score"].maximum == 90
        assert statistics.fields["sleep_score"].mean == pytest.approx(80)
        # 23:30, 24:30, 24:00 -> mean 24:00
        assert statistics.avg_bed_time_min == pytest.approx(24 * 60)
        assert statistics.trends["wakeup_count"] == pytest.approx(1.0)
        assert statistics.trends["deep_sleep_percentage"] == pytest.approx(0.0)

        data = statistics.to_dict()
        assert data["min_score"] == 70
        assert data["avg_bed_time"] == "00:00"
        assert data["avg_wakeup_time"] == "07:00"
        assert data["count"] == 3
        assert set(data["trends"]) == {
            "wakeup_count",
            "deep_sleep_continuity",
            "deep_sleep_percentage",
            "light_sleep_percentage",
        }


class TestComputeWeekly:
    """Tests for compute_weekly."""

    def test_sunday_is_zero(self) -> None:
        assert day_of_week(make_sleep_log(1, date(2024, 1, 7))) == 0
        assert day_of_week(make_sleep_log(1, date(2024, 1, 13))) == 6

    def test_only_present_weekdays(self) -> None:
        """Mondays and Wednesdays only give exactly two groups."""
        mondays = [date(2024, 1, 1) + timedelta(weeks=week) for week in range(3)]
        wednesdays = [date(2024, 1, 3) + timedelta(weeks=week) for week in range(2)]
        records = [make_sleep_log(1, day, sleep_score=60.0) for day in mondays] + [
            make_sleep_log(1, day, sleep_score=90.0) for day in wednesdays
        ]

        weekly = compute_weekly(records)

        assert [group.day_of_week for group in weekly] == [1, 3]
        assert [group.count for group in weekly] == [3, 2]
        assert weekly[0].means["sleep_score"] == pytest.approx(60)
        assert weekly[1].to_dict()["avg_score"] == pytest.approx(90)

    def test_empty(self) -> None:
        assert compute_weekly([]) == []


class TestDashboardService:
    """Tests for DashboardService."""

    async def test_statistics_none_without_records(
        self, async_session: AsyncSession, test_user: User
    ) -> None:
        assert await DashboardService(async_session).get_statistics(test_user.id) is None

    async def test_statistics_scoped_to_user(
        self, async_session: AsyncSession, test_user: User, test_user_2: User
    ) -> None:
        await seed_sleep_logs(async_session, test_user.id, date(2024, 1, 1), days=5)
        await seed_sleep_logs(async_session, test_user_2.id, date(2024, 1, 1), days=2)

        statistics = await DashboardService(async_session).get_statistics(test_user.id)

        assert statistics is not None
        assert statistics.count == 5
        assert statistics.fields["sleep_score"].minimum == 70
        assert statistics.fields["sleep_score"].maximum == 74

    async def test_weekly_over_a_week(self, async_session: AsyncSession, test_user: User) -> None:
        await seed_sleep_logs(async_session, test_user.id, date(2024, 1, 1), days=7)

        weekly = await DashboardService(async_session).get_weekly(test_user.id)

        assert [group.day_of_week for group in weekly] == list(range(7))
        assert all(group.count == 1 for group in weekly)
