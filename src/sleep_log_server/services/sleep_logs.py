"""Sleep log persistence service (manual entry, listing, update, delete)."""

import math
from dataclasses import dataclass
from datetime import date

import structlog
from litestar.exceptions import NotFoundException, PermissionDeniedException
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.core.exceptions import DuplicateSleepLogError
from sleep_log_server.models.sleep_log import SleepLog
from sleep_log_server.models.user import User
from sleep_log_server.schemas.sleep_log import SleepLogInput

logger = structlog.get_logger()


@dataclass
class SleepLogPage:
    """One page of a user's sleep logs, newest first."""

    items: list[SleepLog]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Number of pages at this page size."""
        return math.ceil(self.total / self.limit) if self.limit else 0


def month_bounds(month: str) -> tuple[date, date]:
    """First day of a YYYY-MM month and first day of the following month."""
    year, month_number = (int(part) for part in month.split("-"))
    start = date(year, month_number, 1)
    if month_number == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month_number + 1, 1)


class SleepLogService:
    """Service for reading and writing one user's sleep logs.

    Every method takes the owning user id explicitly; nothing is read from
    request state.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize sleep log service.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="sleep_logs")

    async def resolve_view_user_id(self, requester_id: int, target_user_id: int | None) -> int:
        """Work out whose data a read request may see.

        Args:
            requester_id: Authenticated user
            target_user_id: Optional other user to view

        Returns:
            The user id to read from

        Raises:
            PermissionDeniedException: If the target user is missing or not public
        """
        if target_user_id is None or target_user_id == requester_id:
            return requester_id

        result = await self.session.execute(select(User.is_public).where(User.id == target_user_id))
        is_public = result.scalar_one_or_none()
        if not is_public:
            self.logger.warning(
                "Denied view of private user data",
                requester_id=requester_id,
                target_user_id=target_user_id,
            )
            raise PermissionDeniedException("Access denied: User data is not public")
        return target_user_id

    async def find_by_date(
        self, user_id: int, sleep_date: date, exclude_id: int | None = None
    ) -> SleepLog | None:
        """Look up a user's record for a night.

        Args:
            user_id: Owner
            sleep_date: Night to look for
            exclude_id: Ignore this record (used when updating it)
        """
        stmt = select(SleepLog).where(
            SleepLog.user_id == user_id,
            SleepLog.sleep_date == sleep_date,
        )
        if exclude_id is not None:
            stmt = stmt.where(SleepLog.id != exclude_id)

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, user_id: int, data: SleepLogInput) -> SleepLog:
        """Insert a new record.

        Raises:
            DuplicateSleepLogError: If the user already has a record for the date
        """
        if await self.find_by_date(user_id, data.sleep_date):
            raise DuplicateSleepLogError()

        sleep_log = SleepLog.from_input(user_id, data)
        self.session.add(sleep_log)
        await self._commit_unique()

        self.logger.info("Sleep log created", user_id=user_id, sleep_date=str(data.sleep_date))
        return sleep_log

    async def get(self, user_id: int, sleep_log_id: int) -> SleepLog:
        """Fetch one record owned by the user.

        Raises:
            NotFoundException: If no such record exists for the user
        """
        result = await self.session.execute(
            select(SleepLog).where(SleepLog.id == sleep_log_id, SleepLog.user_id == user_id)
        )
        sleep_log = result.scalar_one_or_none()
        if sleep_log is None:
            raise NotFoundException("Sleep log not found")
        return sleep_log

    async def update(self, user_id: int, sleep_log_id: int, data: SleepLogInput) -> SleepLog:
        """Replace every field of an existing record.

        Raises:
            DuplicateSleepLogError: If another record of the user has the new date
            NotFoundException: If the record does not exist for the user
        """
        if await self.find_by_date(user_id, data.sleep_date, exclude_id=sleep_log_id):
            raise DuplicateSleepLogError()

        sleep_log = await self.get(user_id, sleep_log_id)
        sleep_log.apply(data)
        await self._commit_unique()

        self.logger.info("Sleep log updated", user_id=user_id, sleep_log_id=sleep_log_id)
        return sleep_log

    async def delete(self, user_id: int, sleep_log_id: int) -> None:
        """Delete a record.

        Raises:
            NotFoundException: If nothing was deleted
        """
        result = await self.session.execute(
            delete(SleepLog).where(SleepLog.id == sleep_log_id, SleepLog.user_id == user_id)
        )
        if result.rowcount == 0:
            await self.session.rollback()
            raise NotFoundException("Sleep log not found")

        await self.session.commit()
        self.logger.info("Sleep log deleted", user_id=user_id, sleep_log_id=sleep_log_id)

    async def list_month(self, user_id: int, month: str) -> list[SleepLog]:
        """All records of a YYYY-MM month, oldest first."""
        start, end = month_bounds(month)
        result = await self.session.execute(
            select(SleepLog)
            .where(SleepLog.user_id == user_id)
            .where(SleepLog.sleep_date >= start)
            .where(SleepLog.sleep_date < end)
            .order_by(SleepLog.sleep_date.asc())
        )
        return list(result.scalars().all())

    async def list_page(self, user_id: int, page: int, limit: int) -> SleepLogPage:
        """One page of records, newest first."""
        result = await self.session.execute(
            select(SleepLog)
            .where(SleepLog.user_id == user_id)
            .order_by(SleepLog.sleep_date.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        items = list(result.scalars().all())

        count_result = await self.session.execute(
            select(func.count(SleepLog.id)).where(SleepLog.user_id == user_id)
        )
        total = count_result.scalar() or 0

        return SleepLogPage(items=items, total=total, page=page, limit=limit)

    async def list_all(self, user_id: int) -> list[SleepLog]:
        """Every record of the user, oldest first."""
        result = await self.session.execute(
            select(SleepLog)
            .where(SleepLog.user_id == user_id)
            .order_by(SleepLog.sleep_date.asc())
        )
        return list(result.scalars().all())

    async def _commit_unique(self) -> None:
        """Commit, turning a unique (user_id, sleep_date) violation into a 409."""
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateSleepLogError() from exc
