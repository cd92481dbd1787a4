"""Exception hierarchy shared by the user directory helpers."""
from __future__ import annotations

from typing import Optional


class UserDirectoryError(RuntimeError):
    """Base class for every contract violation raised by :mod:`userdir`."""


class InvalidArgument(UserDirectoryError, ValueError):
    """Raised when an argument has the wrong shape or type."""


class MissingArgument(InvalidArgument):
    """Raised when a required positional argument is empty or absent."""


class MissingField(InvalidArgument):
    """Raised when a candidate record lacks a required field."""


class InvalidPassword(InvalidArgument):
    """Raised when a password is empty or not a string."""


class InvalidRole(InvalidArgument):
    """Raised when a role is outside the known hierarchy."""


class InvalidUser(InvalidArgument):
    """Raised when a user payload cannot be turned into a session token."""


class InvalidToken(InvalidArgument):
    """Raised when a session token is empty or not a string."""


class MalformedToken(InvalidArgument):
    """Raised when a session token cannot be decoded."""


class InvalidDate(InvalidArgument):
    """Raised when a birth date cannot be parsed."""


class DuplicateEmail(UserDirectoryError, ValueError):
    """Raised when an email address is already present in the directory."""

    def __init__(self, email: str) -> None:
        super().__init__("A user with that email already exists")
        self.email = email


class NotFound(UserDirectoryError, LookupError):
    """Raised when no record carries the requested identifier."""

    def __init__(self, user_id: object) -> None:
        super().__init__(f"User with id {user_id!r} not found")
        self.user_id = user_id


class NetworkError(UserDirectoryError):
    """Raised when a remote user API call does not succeed."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(UserDirectoryError):
    """Raised when the settings file or environment is misconfigured."""


__all__ = [
    "ConfigurationError",
    "DuplicateEmail",
    "InvalidArgument",
    "InvalidDate",
    "InvalidPassword",
    "InvalidRole",
    "InvalidToken",
    "InvalidUser",
    "MalformedToken",
    "MissingArgument",
    "MissingField",
    "NetworkError",
    "NotFound",
    "UserDirectoryError",
]
