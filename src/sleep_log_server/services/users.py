"""User account service (signup, login, public profile visibility)."""

import structlog
from litestar.exceptions import NotAuthorizedException, NotFoundException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sleep_log_server.core.exceptions import DuplicateUsernameError
from sleep_log_server.core.password import hash_password, verify_password
from sleep_log_server.models.user import User

logger = structlog.get_logger()

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class UserService:
    """Service for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user service.

        Args:
            session: Database session
        """
        self.session = session
        self.logger = logger.bind(service="users")

    async def get_by_username(self, username: str) -> User | None:
        """Look up a user by username."""
        result = await self.session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, username: str, password: str) -> User:
        """Register a new account.

        Raises:
            DuplicateUsernameError: If the username is taken
        """
        if await self.get_by_username(username):
            raise DuplicateUsernameError()

        user = User(username=username, password_hash=hash_password(password))
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise DuplicateUsernameError() from exc

        self.logger.info("User registered", user_id=user.id, username=username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """Check credentials and return the matching user.

        Raises:
            NotAuthorizedException: If the username or password is wrong
        """
        user = await self.get_by_username(username)

        # Verification runs against a dummy hash for unknown usernames
        if not verify_password(password, user.password_hash if user else None) or user is None:
            self.logger.warning("Failed login attempt", username=username)
            raise NotAuthorizedException(INVALID_CREDENTIALS_MESSAGE)

        return user

    async def list_users(self) -> list[User]:
        """All users ordered by id."""
        result = await self.session.execute(select(User).order_by(User.id.asc()))
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        """Fetch a user by id.

        Raises:
            NotFoundException: If no such user exists
        """
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundException("User not found")
        return user

    async def set_visibility(self, user_id: int, is_public: bool) -> User:
        """Make a user's data viewable by others, or private again."""
        user = await self.get_user(user_id)
        user.is_public = is_public
        await self.session.commit()

        self.logger.info("User visibility changed", user_id=user_id, is_public=is_public)
        return user
