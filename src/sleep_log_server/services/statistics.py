"""Dashboard aggregation over a user's sleep logs.

Two read-only views are computed from a single date-ordered fetch:

- Statistics: min/max/mean/count per metric, mean bed and wake times, and
  least-squares trend slopes for selected metrics.
- Weekly: the same means grouped by day of week (0=Sunday .. 6=Saturday).

Bed times cluster around midnight, so before averaging any bed time earlier
than 15:00 is moved onto the next day (+24h). 00:30 then sits next to 23:45
instead of at the other end of the scale. Wake times are averaged as-is.
"""

import math
from collections import defaultdict
from dataclasses import dataclass, field
from statistics import mean
from typing import Any

import structlog
from scipy import stats
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.models.sleep_log import SleepLog
from sleep_log_server.services.normalizer import MINUTES_PER_DAY, time_to_minutes
from sleep_log_server.services.sleep_logs import SleepLogService

logger = structlog.get_logger()

# Bed times before this hour belong to the previous evening's night
BED_TIME_FOLD_HOUR = 15

# Metric attribute -> key prefix used in API responses
SUMMARY_FIELDS = {
    "sleep_score": "score",
    "sleep_duration": "duration",
    "wakeup_count": "wakeup_count",
    "deep_sleep_continuity": "deep_sleep_continuity",
    "deep_sleep_percentage": "deep_sleep_percentage",
    "light_sleep_percentage": "light_sleep_percentage",
    "rem_sleep_percentage": "rem_sleep_percentage",
}

# Metrics that get a trend slope
TREND_FIELDS = (
    "wakeup_count",
    "deep_sleep_continuity",
    "deep_sleep_percentage",
    "light_sleep_percentage",
)


@dataclass
class FieldSummary:
    """Min, max, mean and count of one metric."""

    minimum: float
    maximum: float
    mean: float
    count: int


@dataclass
class SleepStatistics:
    """Whole-history statistics for one user. Derived, never stored."""

    count: int
    fields: dict[str, FieldSummary]
    avg_bed_time_min: float
    avg_wakeup_time_min: float
    trends: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the dashboard response shape."""
        data: dict[str, Any] = {}
        for attribute, prefix in SUMMARY_FIELDS.items():
            summary = self.fields[attribute]
            data[f"min_{prefix}"] = summary.minimum
            data[f"max_{prefix}"] = summary.maximum
            data[f"avg_{prefix}"] = summary.mean
        data["count"] = self.count
        data["avg_bed_time_min"] = self.avg_bed_time_min
        data["avg_wakeup_time_min"] = self.avg_wakeup_time_min
        data["avg_bed_time"] = format_minutes_as_clock(self.avg_bed_time_min)
        data["avg_wakeup_time"] = format_minutes_as_clock(self.avg_wakeup_time_min)
        data["trends"] = dict(self.trends)
        return data


@dataclass
class WeekdayAverages:
    """Mean metrics for all records falling on one day of the week."""

    day_of_week: int
    count: int
    means: dict[str, float]
    avg_bed_time_min: float
    avg_wakeup_time_min: float

    def to_dict(self) -> dict[str, Any]:
        """Flatten into the dashboard response shape."""
        data: dict[str, Any] = {"day_of_week": self.day_of_week}
        for attribute, prefix in SUMMARY_FIELDS.items():
            data[f"avg_{prefix}"] = self.means[attribute]
        data["avg_bed_time_min"] = self.avg_bed_time_min
        data["avg_wakeup_time_min"] = self.avg_wakeup_time_min
        data["avg_bed_time"] = format_minutes_as_clock(self.avg_bed_time_min)
        data["avg_wakeup_time"] = format_minutes_as_clock(self.avg_wakeup_time_min)
        data["count"] = self.count
        return data


def summarize(values: list[float]) -> FieldSummary:
    """Summarize a non-empty list of values."""
    return FieldSummary(
        minimum=min(values),
        maximum=max(values),
        mean=mean(values),
        count=len(values),
    )


def fold_bed_time_minutes(bed_time: str) -> int:
    """Minutes since midnight, with early-hours bed times moved past 24:00."""
    minutes = time_to_minutes(bed_time)
    if minutes // 60 < BED_TIME_FOLD_HOUR:
        minutes += MINUTES_PER_DAY
    return minutes


def wake_time_minutes(wakeup_time: str) -> int:
    """Minutes since midnight for a wake time."""
    return time_to_minutes(wakeup_time)


def format_minutes_as_clock(minutes: float) -> str:
    """Render (possibly folded) minutes as HH:MM on a 24-hour clock."""
    total = round(minutes) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


def linear_trend_slope(values: list[float]) -> float:
    """Least-squares slope of values against their index 0..n-1.

    Returns 0.0 with fewer than two points.
    """
    if len(values) < 2:
        return 0.0

    result = stats.linregress(range(len(values)), values)
    slope = float(result.slope)

    # linregress can return NaN for degenerate input
    if math.isnan(slope):
        return 0.0
    return slope


def compute_statistics(records: list[SleepLog]) -> SleepStatistics | None:
    """Whole-history statistics for date-ordered records, None when empty."""
    if not records:
        return None

    fields = {
        attribute: summarize([getattr(record, attribute) for record in records])
        for attribute in SUMMARY_FIELDS
    }
    trends = {
        attribute: linear_trend_slope([getattr(record, attribute) for record in records])
        for attribute in TREND_FIELDS
    }

    return SleepStatistics(
        count=len(records),
        fields=fields,
        avg_bed_time_min=mean(fold_bed_time_minutes(r.bed_time) for r in records),
        avg_wakeup_time_min=mean(wake_time_minutes(r.wakeup_time) for r in records),
        trends=trends,
    )


def day_of_week(record: SleepLog) -> int:
    """Day of week of a record's date, 0=Sunday .. 6=Saturday."""
    return record.sleep_date.isoweekday() % 7


def compute_weekly(records: list[SleepLog]) -> list[WeekdayAverages]:
    """Per-weekday means, ordered Sunday first. Empty weekdays are omitted."""
    groups: dict[int, list[SleepLog]] = defaultdict(list)
    for record in records:
        groups[day_of_week(record)].append(record)

    return [
        WeekdayAverages(
            day_of_week=weekday,
            count=len(group),
            means={
                attribute: mean(getattr(record, attribute) for record in group)
                for attribute in SUMMARY_FIELDS
            },
            avg_bed_time_min=mean(fold_bed_time_minutes(r.bed_time) for r in group),
            avg_wakeup_time_min=mean(wake_time_minutes(r.wakeup_time) for r in group),
        )
        for weekday, group in sorted(groups.items())
    ]


class DashboardService:
    """Service computing dashboard views for one user."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize dashboard service.

        Args:
            session: Database session
        """
        self.session = session
        self.sleep_logs = SleepLogService(session)
        self.logger = logger.bind(service="dashboard")

    async def get_statistics(self, user_id: int) -> SleepStatistics | None:
        """Statistics over every record of the user.

        Args:
            user_id: Whose records to aggregate

        Returns:
            Statistics, or None when the user has no records
        """
        records = await self.sleep_logs.list_all(user_id)
        self.logger.debug("Computing statistics", user_id=user_id, records=len(records))
        return compute_statistics(records)

    async def get_weekly(self, user_id: int) -> list[WeekdayAverages]:
        """Day-of-week averages over every record of the user."""
        records = await self.sleep_logs.list_all(user_id)
        self.logger.debug("Computing weekly averages", user_id=user_id, records=len(records))
        return compute_weekly(records)
