"""Password hashing for user accounts (Argon2)."""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerifyMismatchError

_hasher = PasswordHasher()

# Verified against when the username is unknown so both login paths cost the same
_DUMMY_HASH = _hasher.hash("sleep-log-dummy-password")


def hash_password(password: str) -> str:
    """Hash a plain text password for storage in users.password_hash."""
    return _hasher.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a login password against the stored hash.

    Args:
        password: Plain text password from the login request
        password_hash: Stored hash, or None when the user does not exist

    Returns:
        True if the password matches
    """
    try:
        return _hasher.verify(password_hash or _DUMMY_HASH, password) and password_hash is not None
    except (VerifyMismatchError, InvalidHashError):
        return False
