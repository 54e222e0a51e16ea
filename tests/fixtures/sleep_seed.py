"""Sleep log test data helpers.

Builds CSV payloads and persisted records with stage percentages that
always add up to 100 unless a test deliberately breaks them.
"""

from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.models.sleep_log import SleepLog

FIXED_HEADER = "date,score,bed_time,wakeup_time,wakeup_count,continuity,duration,deep,light,rem"

LABELED_HEADER = (
    '"日付","点数","入眠時間","起床時間","目が覚めた回数",'
    '"深い睡眠の持続性","深い睡眠の割合","浅い睡眠の割合","レム睡眠の割合"'
)


def sleep_log_payload(sleep_date: str = "2024-01-01", **overrides) -> dict:
    """A valid JSON body for the sleep log endpoints."""
    payload = {
        "sleep_date": sleep_date,
        "sleep_score": 85,
        "bed_time": "23:30",
        "wakeup_time": "07:00",
        "sleep_duration": 450,
        "wakeup_count": 1,
        "deep_sleep_continuity": 90,
        "deep_sleep_percentage": 50,
        "light_sleep_percentage": 30,
        "rem_sleep_percentage": 20,
    }
    payload.update(overrides)
    return payload


def fixed_row(
    sleep_date: str,
    score: int = 85,
    deep: int = 50,
    light: int = 30,
    rem: int = 20,
) -> str:
    """One fixed-position CSV row."""
    return f"{sleep_date},{score},23:30,07:00,1,90,450,{deep},{light},{rem}"


def fixed_csv(start: date, days: int, broken_rows: tuple[int, ...] = ()) -> str:
    """Fixed-position CSV with a header and one row per day.

    Rows listed in broken_rows (1-based) get stage percentages summing to 99.
    """
    lines = [FIXED_HEADER]
    for index in range(days):
        row_date = (start + timedelta(days=index)).isoformat()
        if index + 1 in broken_rows:
            lines.append(fixed_row(row_date, deep=50, light=30, rem=19))
        else:
            lines.append(fixed_row(row_date))
    return "\n".join(lines) + "\n"


def make_sleep_log(user_id: int, sleep_date: date, **overrides) -> SleepLog:
    """An unsaved SleepLog with sensible defaults."""
    values = {
        "sleep_score": 80.0,
        "bed_time": "23:30",
        "wakeup_time": "07:00",
        "sleep_duration": 450,
        "wakeup_count": 1,
        "deep_sleep_continuity": 85.0,
        "deep_sleep_percentage": 20.0,
        "light_sleep_percentage": 55.0,
        "rem_sleep_percentage": 25.0,
    }
    values.update(overrides)
    return SleepLog(user_id=user_id, sleep_date=sleep_date, **values)


async def seed_sleep_logs(
    session: AsyncSession,
    user_id: int,
    start: date,
    days: int,
) -> list[SleepLog]:
    """Persist one record per day starting at start, score rising by one each day."""
    sleep_logs = [
        make_sleep_log(user_id, start + timedelta(days=index), sleep_score=70.0 + index)
        for index in range(days)
    ]
    session.add_all(sleep_logs)
    await session.commit()
    return sleep_logs
