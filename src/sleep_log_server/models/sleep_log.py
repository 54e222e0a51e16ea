"""Sleep log data model."""

from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import Date, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sleep_log_server.models.base import Base, TimestampMixin, UserScopedMixin

if TYPE_CHECKING:
    from sleep_log_server.schemas.sleep_log import SleepLogInput


class SleepLog(Base, UserScopedMixin, TimestampMixin):
    """One night's sleep metrics for one user.

    (user_id, sleep_date) is unique: the store rejects a second record for
    the same night, which is the only guard against racing inserts.
    """

    __tablename__ = "sleep_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "sleep_date", name="uq_sleep_logs_user_date"),
        {"comment": "Nightly sleep metrics entered manually or imported from CSV"},
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Sleep date (the night's date, not a timestamp)
    sleep_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    sleep_score: Mapped[float] = mapped_column(Float, nullable=False)

    # Clock times, "HH:MM" 24-hour
    bed_time: Mapped[str] = mapped_column(String(5), nullable=False)
    wakeup_time: Mapped[str] = mapped_column(String(5), nullable=False)

    # Minutes asleep
    sleep_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    wakeup_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # Quality score 0-100, not a share of total sleep
    deep_sleep_continuity: Mapped[float] = mapped_column(Float, nullable=False)

    # Stage shares, always summing to 100
    deep_sleep_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    light_sleep_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    rem_sleep_percentage: Mapped[float] = mapped_column(Float, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<SleepLog(user_id={self.user_id}, sleep_date={self.sleep_date}, "
            f"score={self.sleep_score})>"
        )

    @classmethod
    def from_input(cls, user_id: int, data: "SleepLogInput") -> "SleepLog":
        """Create a SleepLog from a validated payload.

        Args:
            user_id: Owner of the record
            data: Validated sleep log fields

        Returns:
            SleepLog instance ready to be saved
        """
        return cls(user_id=user_id, **data.model_dump())

    def apply(self, data: "SleepLogInput") -> None:
        """Replace every metric with the values from a validated payload."""
        for field, value in data.model_dump().items():
            setattr(self, field, value)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "sleep_date": self.sleep_date.isoformat(),
            "sleep_score": self.sleep_score,
            "bed_time": self.bed_time,
            "wakeup_time": self.wakeup_time,
            "sleep_duration": self.sleep_duration,
            "wakeup_count": self.wakeup_count,
            "deep_sleep_continuity": self.deep_sleep_continuity,
            "deep_sleep_percentage": self.deep_sleep_percentage,
            "light_sleep_percentage": self.light_sleep_percentage,
            "rem_sleep_percentage": self.rem_sleep_percentage,
        }
