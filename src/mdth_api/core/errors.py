"""Account error taxonomy.

Each error carries the HTTP status it maps to and a client-safe message.
The API layer renders them as ``{"error": message}``.
"""

from fastapi import status


class AccountError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AccountError):
    """Missing or malformed input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"

    def __init__(self, message: str | None = None, fields: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}


class AuthError(AccountError):
    """Bad credentials.  The message never says which factor was wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class InvalidTokenError(AuthError):
    """A bearer token was presented but failed signature or expiry checks."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid or expired token"


class ForbiddenError(AccountError):
    """Caller lacks the role required for the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Admin access required"


class NotFoundError(AccountError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class ConflictError(AccountError):
    """Username or email already belongs to another account."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Username or email already exists"


class InternalError(AccountError):
    """Unexpected store or hashing failure; details stay in the server log."""
