"""CSV export of sleep logs.

The export omits sleep_duration; importing the file again derives it from
the bed and wake times.
"""

import csv
import io
from datetime import date

from sleep_log_server.models.sleep_log import SleepLog

EXPORT_HEADER = (
    "日付",
    "睡眠スコア",
    "就寝時間",
    "起床時間",
    "中途覚醒回数",
    "深い睡眠の持続性",
    "深い睡眠割合",
    "浅い睡眠割合",
    "レム睡眠割合",
)


def format_number(value: float | int) -> str:
    """Write whole numbers without a trailing ".0"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def export_row(sleep_log: SleepLog) -> list[str]:
    """Cells for one record, in EXPORT_HEADER order."""
    return [
        sleep_log.sleep_date.isoformat(),
        format_number(sleep_log.sleep_score),
        sleep_log.bed_time,
        sleep_log.wakeup_time,
        format_number(sleep_log.wakeup_count),
        format_number(sleep_log.deep_sleep_continuity),
        format_number(sleep_log.deep_sleep_percentage),
        format_number(sleep_log.light_sleep_percentage),
        format_number(sleep_log.rem_sleep_percentage),
    ]


def build_export_csv(sleep_logs: list[SleepLog]) -> str:
    """Render records (already ordered by date) as CSV text with a header."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for sleep_log in sleep_logs:
        writer.writerow(export_row(sleep_log))
    return output.getvalue()


def export_filename(export_date: date | None = None) -> str:
    """Download filename stamped with the export date."""
    return f"sleep_logs_{(export_date or date.today()).isoformat()}.csv"
