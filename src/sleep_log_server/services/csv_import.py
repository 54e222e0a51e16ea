"""CSV import pipeline for sleep logs.

Raw CSV text goes through four steps:

1. Line extraction (blank lines dropped, empty input rejected)
2. Layout detection from the first line: either a fixed-position layout
   (columns read by position) or a labeled layout (columns found by
   matching header labels)
3. Per-row normalization and validation
4. Duplicate check against the store, then insert

Bad rows never abort the batch; they are counted and reported with their
1-based row number. Rows are processed strictly in file order and every
insert is committed before the next row's duplicate check.
"""

import csv
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.core.exceptions import EmptyImportError
from sleep_log_server.models.sleep_log import SleepLog
from sleep_log_server.schemas.sleep_log import validate_sleep_log
from sleep_log_server.services.normalizer import (
    looks_like_date,
    normalize_clock_time,
    normalize_date,
    parse_count,
    parse_number,
    parse_percentage,
    resolve_duration,
    strip_quotes_and_trim,
)
from sleep_log_server.services.sleep_logs import SleepLogService

logger = structlog.get_logger()

# Column order of the fixed-position layout
FIXED_POSITION_FIELDS = (
    "sleep_date",
    "sleep_score",
    "bed_time",
    "wakeup_time",
    "wakeup_count",
    "deep_sleep_continuity",
    "sleep_duration",
    "deep_sleep_percentage",
    "light_sleep_percentage",
    "rem_sleep_percentage",
)

# Accepted header labels per field, in priority order.
# sleep_duration has none: the labeled layout derives it from bed/wake times.
FIELD_LABELS: dict[str, tuple[str, ...]] = {
    "sleep_date": ("日付", "sleep_date"),
    "sleep_score": ("点数", "睡眠スコア", "sleep_score"),
    "bed_time": ("入眠時間", "就寝時間", "bed_time"),
    "wakeup_time": ("起床時間", "wakeup_time"),
    "wakeup_count": ("目が覚めた回数", "中途覚醒回数", "wakeup_count"),
    "deep_sleep_continuity": ("深い睡眠の持続性", "deep_sleep_continuity"),
    "deep_sleep_percentage": ("深い睡眠の割合", "深い睡眠割合", "deep_sleep_percentage"),
    "light_sleep_percentage": ("浅い睡眠の割合", "浅い睡眠割合", "light_sleep_percentage"),
    "rem_sleep_percentage": ("レム睡眠の割合", "レム睡眠割合", "rem_sleep_percentage"),
}


@dataclass(frozen=True)
class FixedPositionLayout:
    """Columns are read by position; header labels (if any) are ignored."""

    has_header: bool
    kind: Literal["fixed"] = "fixed"

    def column_index(self, field_name: str) -> int | None:
        """Position of a field's column."""
        return FIXED_POSITION_FIELDS.index(field_name)


@dataclass(frozen=True)
class LabeledLayout:
    """Columns are located by matching header labels."""

    columns: dict[str, int]
    kind: Literal["labeled"] = "labeled"

    @property
    def has_header(self) -> bool:
        """A labeled layout always starts with its header line."""
        return True

    def column_index(self, field_name: str) -> int | None:
        """Position of a field's column, None when no header label matched."""
        return self.columns.get(field_name)


CsvLayout = FixedPositionLayout | LabeledLayout


@dataclass
class ImportOutcome:
    """Result of one import batch. Never persisted."""

    success_count: int = 0
    skip_count: int = 0
    error_count: int = 0
    errors: list[str] = field(default_factory=list)

    def record_error(self, row_number: int, reasons: list[str]) -> None:
        """Count a rejected row and keep its reasons."""
        self.error_count += 1
        self.errors.append(f"Row {row_number}: {'; '.join(reasons)}")

    @property
    def summary(self) -> str:
        """One-line human-readable summary."""
        return (
            f"Import complete: {self.success_count} inserted, "
            f"{self.skip_count} skipped (duplicate), {self.error_count} errors."
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the API response."""
        return {
            "message": self.summary,
            "success_count": self.success_count,
            "skip_count": self.skip_count,
            "error_count": self.error_count,
            "errors": self.errors,
        }


def extract_lines(text: str) -> list[str]:
    """Split CSV text into non-blank lines.

    Raises:
        EmptyImportError: If nothing but whitespace remains
    """
    lines = [line for line in text.lstrip("\ufeff").splitlines() if line.strip()]
    if not lines:
        raise EmptyImportError()
    return lines


def split_cells(line: str) -> list[str]:
    """Tokenize one CSV line into quote-stripped, trimmed cells."""
    try:
        cells = next(csv.reader([line]))
    except csv.Error:
        cells = line.split(",")
    return [strip_quotes_and_trim(cell) for cell in cells]


def find_label_column(headers: list[str], labels: tuple[str, ...]) -> int | None:
    """Find the column for a field by its accepted labels.

    Exact matches win over substring matches; within each pass, labels are
    tried in priority order.
    """
    for label in labels:
        if label in headers:
            return headers.index(label)
    for label in labels:
        for index, header in enumerate(headers):
            if label in header:
                return index
    return None


def first_line_is_data(cells: list[str]) -> bool:
    """Guess whether a header-less file starts straight with a data row.

    Kept on its own so the heuristic can be replaced (e.g. by an explicit
    has-header flag) without touching the rest of the pipeline.
    """
    return bool(cells) and looks_like_date(cells[0])


def detect_layout(header_cells: list[str]) -> CsvLayout:
    """Choose the layout for a file from its first line."""
    columns = {}
    for field_name, labels in FIELD_LABELS.items():
        index = find_label_column(header_cells, labels)
        if index is not None:
            columns[field_name] = index

    if "sleep_date" in columns:
        return LabeledLayout(columns=columns)
    return FixedPositionLayout(has_header=not first_line_is_data(header_cells))


def build_candidate(cells: list[str], layout: CsvLayout) -> dict[str, Any]:
    """Normalize a row's cells into a candidate record for validation."""

    def cell(field_name: str) -> str | None:
        index = layout.column_index(field_name)
        if index is None or index >= len(cells):
            return None
        return cells[index]

    bed_time = normalize_clock_time(cell("bed_time"))
    wakeup_time = normalize_clock_time(cell("wakeup_time"))

    return {
        "sleep_date": normalize_date(cell("sleep_date")),
        "sleep_score": parse_number(cell("sleep_score")),
        "bed_time": bed_time,
        "wakeup_time": wakeup_time,
        "sleep_duration": resolve_duration(cell("sleep_duration"), bed_time, wakeup_time),
        "wakeup_count": parse_count(cell("wakeup_count")),
        "deep_sleep_continuity": parse_number(cell("deep_sleep_continuity")),
        "deep_sleep_percentage": parse_percentage(cell("deep_sleep_percentage")),
        "light_sleep_percentage": parse_percentage(cell("light_sleep_percentage")),
        "rem_sleep_percentage": parse_percentage(cell("rem_sleep_percentage")),
    }


class CsvImportService:
    """Imports CSV text into one user's sleep logs."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize import service.

        Args:
            session: Database session
        """
        self.session = session
        self.sleep_logs = SleepLogService(session)
        self.logger = logger.bind(service="csv_import")

    async def import_csv(self, text: str, user_id: int) -> ImportOutcome:
        """Run the full pipeline over a CSV payload.

        Args:
            text: Raw CSV text
            user_id: Owner of the imported records

        Returns:
            Counts of inserted, skipped and rejected rows with error messages

        Raises:
            EmptyImportError: If the payload has no content
        """
        lines = extract_lines(text)
        layout = detect_layout(split_cells(lines[0]))
        data_lines = lines[1:] if layout.has_header else lines

        self.logger.info(
            "Starting CSV import",
            user_id=user_id,
            layout=layout.kind,
            rows=len(data_lines),
        )

        outcome = ImportOutcome()
        for row_number, line in enumerate(data_lines, start=1):
            await self._import_row(row_number, line, layout, user_id, outcome)

        self.logger.info(
            "CSV import complete",
            user_id=user_id,
            inserted=outcome.success_count,
            skipped=outcome.skip_count,
            errors=outcome.error_count,
        )
        return outcome

    async def _import_row(
        self,
        row_number: int,
        line: str,
        layout: CsvLayout,
        user_id: int,
        outcome: ImportOutcome,
    ) -> None:
        """Normalize, validate and insert a single row."""
        candidate = build_candidate(split_cells(line), layout)
        if not candidate["sleep_date"]:
            return

        result = validate_sleep_log(candidate)
        if isinstance(result, list):
            self.logger.debug("Rejected CSV row", row=row_number, reasons=result)
            outcome.record_error(row_number, result)
            return

        if await self.sleep_logs.find_by_date(user_id, result.sleep_date):
            outcome.skip_count += 1
            return

        self.session.add(SleepLog.from_input(user_id, result))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            # Skip only when the clash was on this night
            if await self.sleep_logs.find_by_date(user_id, result.sleep_date) is None:
                raise
            outcome.skip_count += 1
            return

        outcome.success_count += 1
