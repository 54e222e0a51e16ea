"""Field normalization for raw CSV cells.

Every function here is total: garbled input never raises, it yields a
best-effort value or ``nan`` and the schema validator rejects the record
downstream.
"""

import math
import re
from datetime import datetime

CLOCK_TIME_PATTERN = re.compile(r"\d{2}:\d{2}")
SHORT_CLOCK_TIME_PATTERN = re.compile(r"\d:\d{2}")
HOURS_MINUTES_PATTERN = re.compile(r"(\d{1,2}):(\d{2})")
INTEGER_PATTERN = re.compile(r"\d+")

MINUTES_PER_DAY = 24 * 60


def strip_quotes_and_trim(value: str | None) -> str:
    """Remove one pair of surrounding double quotes and surrounding whitespace."""
    if not value:
        return ""
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value.strip()


def parse_number(value: str | None) -> float:
    """Parse a decimal number, returning nan for empty or non-numeric text."""
    cleaned = strip_quotes_and_trim(value)
    if not cleaned:
        return math.nan
    try:
        return float(cleaned)
    except ValueError:
        return math.nan


def parse_count(value: str | None) -> int | float:
    """Parse a whole-number count; fractional, empty or garbled cells stay float."""
    number = parse_number(value)
    if number.is_integer():
        return int(number)
    return number


def parse_percentage(value: str | None) -> float:
    """Parse a percentage such as "45%" or "45"."""
    cleaned = strip_quotes_and_trim(value)
    if cleaned.endswith("%"):
        cleaned = cleaned[:-1]
    return parse_number(cleaned)


def normalize_clock_time(value: str | None) -> str:
    """Left-pad single-digit hours: "9:05" -> "09:05".

    Anything else passes through unchanged.
    """
    cleaned = strip_quotes_and_trim(value)
    if SHORT_CLOCK_TIME_PATTERN.fullmatch(cleaned):
        return f"0{cleaned}"
    return cleaned


def is_clock_time(value: str) -> bool:
    """Check for a zero-padded HH:MM time."""
    return bool(CLOCK_TIME_PATTERN.fullmatch(value))


def time_to_minutes(value: str) -> int:
    """Minutes since midnight for an HH:MM time."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def compute_duration_minutes(bed_time: str, wakeup_time: str) -> int:
    """Minutes between bed and wake time.

    A wake time earlier in the day than the bed time is taken to be on the
    next day. Only one midnight crossing is representable.
    """
    bed = time_to_minutes(bed_time)
    wake = time_to_minutes(wakeup_time)
    if wake < bed:
        wake += MINUTES_PER_DAY
    return wake - bed


def resolve_duration(raw_duration: str | None, bed_time: str, wakeup_time: str) -> int:
    """Work out the sleep duration in minutes for a row.

    The raw field may hold plain minutes ("450") or hours:minutes ("7:30").
    When it is absent, empty or unparseable, the duration is derived from the
    bed and wake times, or 0 when those are not valid times either.
    """
    cleaned = strip_quotes_and_trim(raw_duration)

    if INTEGER_PATTERN.fullmatch(cleaned):
        return int(cleaned)

    match = HOURS_MINUTES_PATTERN.fullmatch(cleaned)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    if is_clock_time(bed_time) and is_clock_time(wakeup_time):
        return compute_duration_minutes(bed_time, wakeup_time)
    return 0


def normalize_date(value: str | None) -> str:
    """Canonicalize YYYY/MM/DD to YYYY-MM-DD."""
    return strip_quotes_and_trim(value).replace("/", "-")


def looks_like_date(value: str | None) -> bool:
    """Check whether a cell parses as a calendar date (either separator)."""
    try:
        datetime.strptime(normalize_date(value), "%Y-%m-%d")
    except ValueError:
        return False
    return True
