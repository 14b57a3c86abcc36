"""Error kinds raised by the user lifecycle service and its stores."""

from __future__ import annotations


class UserServiceError(RuntimeError):
    """Base class for validation outcomes surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(UserServiceError):
    """Raised when an update would violate username uniqueness."""

    status_code = 400


class UnauthorizedError(UserServiceError):
    """Raised when login credentials do not match a stored user."""

    status_code = 401


class NotFoundError(UserServiceError):
    """Raised when an operation targets an unknown user id."""

    status_code = 404


class ConflictError(UserServiceError):
    """Raised when registering a username that is already taken."""

    status_code = 409


class DuplicateUsernameError(ValueError):
    """Raised by a store when a write collides with an existing username."""


__all__ = [
    "BadRequestError",
    "ConflictError",
    "DuplicateUsernameError",
    "NotFoundError",
    "UnauthorizedError",
    "UserServiceError",
]
