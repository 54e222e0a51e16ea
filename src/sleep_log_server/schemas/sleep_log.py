"""Sleep log validation schema.

``SleepLogInput`` is the request body for manual create/update and the
final gate every imported CSV row must pass. Validation is all-or-nothing:
any violation rejects the whole record.
"""

import re
from datetime import date
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_PATTERN = re.compile(r"\d{2}:\d{2}")

STAGE_FIELDS = ("deep_sleep_percentage", "light_sleep_percentage", "rem_sleep_percentage")
STAGE_SUM_MESSAGE = (
    "deep_sleep_percentage + light_sleep_percentage + rem_sleep_percentage must equal 100"
)


class SleepLogInput(BaseModel):
    """A complete, validated night of sleep metrics.

    Numeric fields are strict: strings and booleans are not numbers.
    """

    model_config = ConfigDict(allow_inf_nan=False, extra="ignore")

    sleep_date: date = Field(description="Night of the record (YYYY-MM-DD)")
    sleep_score: float = Field(
        ge=0, le=100, strict=True, description="Overall sleep score (0-100)"
    )
    bed_time: str = Field(description="Time fallen asleep (HH:MM, 24-hour)")
    wakeup_time: str = Field(description="Time woken up (HH:MM, 24-hour)")
    sleep_duration: int = Field(gt=0, strict=True, description="Minutes asleep")
    wakeup_count: int = Field(
        ge=0, strict=True, description="Number of times woken during the night"
    )
    deep_sleep_continuity: float = Field(
        ge=0, le=100, strict=True, description="Deep sleep continuity score (0-100)"
    )
    deep_sleep_percentage: float = Field(
        ge=0, le=100, strict=True, description="Share of deep sleep (%)"
    )
    light_sleep_percentage: float = Field(
        ge=0, le=100, strict=True, description="Share of light sleep (%)"
    )
    rem_sleep_percentage: float = Field(
        ge=0, le=100, strict=True, description="Share of REM sleep (%)"
    )

    @field_validator("sleep_date", mode="before")
    @classmethod
    def check_date_format(cls, value: Any) -> Any:
        """Only accept ISO dates written as YYYY-MM-DD."""
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
            raise ValueError("must use YYYY-MM-DD format")
        return value

    @field_validator("bed_time", "wakeup_time")
    @classmethod
    def check_time_format(cls, value: str) -> str:
        """Clock times must be zero-padded HH:MM."""
        if not TIME_PATTERN.fullmatch(value):
            raise ValueError("must use HH:MM format")
        return value

    @model_validator(mode="after")
    def check_stage_sum(self) -> "SleepLogInput":
        """Stage percentages must add up to exactly 100 (no rounding tolerance)."""
        total = self.deep_sleep_percentage + self.light_sleep_percentage + self.rem_sleep_percentage
        if total != 100:
            raise ValueError(STAGE_SUM_MESSAGE)
        return self


def format_validation_errors(exc: ValidationError) -> list[str]:
    """Turn a pydantic ValidationError into "<field>: <rule>" messages."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        message = error["msg"]
        if error["type"] == "value_error":
            # Drop pydantic's "Value error, " prefix from our own rules
            message = str(error["ctx"]["error"])
        messages.append(f"{field}: {message}" if field else message)
    return messages


def validate_sleep_log(candidate: dict[str, Any]) -> SleepLogInput | list[str]:
    """Validate a normalized candidate record.

    Args:
        candidate: Field values already converted to their target types

    Returns:
        The typed record, or the list of violation messages
    """
    try:
        return SleepLogInput.model_validate(candidate)
    except ValidationError as exc:
        return format_validation_errors(exc)
