"""Domain exceptions mapped onto HTTP responses."""

from litestar.exceptions import ClientException, ValidationException
from litestar.status_codes import HTTP_409_CONFLICT


class DuplicateSleepLogError(ClientException):
    """Raised when a record for the same user and date already exists."""

    status_code = HTTP_409_CONFLICT

    def __init__(self, detail: str = "A sleep log for this date already exists.") -> None:
        """Initialize with a human-readable conflict message."""
        super().__init__(detail)


class DuplicateUsernameError(ClientException):
    """Raised on signup when the username is taken."""

    status_code = HTTP_409_CONFLICT

    def __init__(self) -> None:
        """Initialize with the conflict message."""
        super().__init__("Username is already in use.")


class EmptyImportError(ValidationException):
    """Raised when a CSV import payload has no usable content."""

    def __init__(self, detail: str = "The CSV content is empty.") -> None:
        """Initialize with the reason the payload was rejected."""
        super().__init__(detail)
