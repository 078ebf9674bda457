"""Input validation for account operations.

Pure functions that normalise user-supplied fields and collect every
problem into a ``ValidationResult`` instead of failing on the first one.
"""

from dataclasses import dataclass, field

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
FULL_NAME_MAX_LENGTH = 100

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a request: either ok, or a map of field errors."""

    errors: dict[str, str] = field(default_factory=dict)
    summary: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        """Single client-facing message describing the failure."""
        if self.summary:
            return self.summary
        return next(iter(self.errors.values()), "")


def normalize_username(username: str | None) -> str:
    return (username or "").strip()


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def normalize_full_name(full_name: str | None) -> str | None:
    if full_name is None:
        return None
    return full_name.strip() or None


def is_valid_email(email: str) -> bool:
    """Check an already-normalised email address for valid syntax."""
    try:
        _email_adapter.validate_python(email)
    except PydanticValidationError:
        return False
    return True


def _check_username(username: str, errors: dict[str, str]) -> None:
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        errors["username"] = (
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters long"
        )


def _check_email(email: str, errors: dict[str, str]) -> None:
    if not is_valid_email(email):
        errors["email"] = "Email address is invalid"


def _check_full_name(full_name: str | None, errors: dict[str, str]) -> None:
    if full_name is not None and len(full_name) > FULL_NAME_MAX_LENGTH:
        errors["fullName"] = f"Full name must be at most {FULL_NAME_MAX_LENGTH} characters long"


def validate_registration(
    username: str | None,
    email: str | None,
    password: str | None,
    full_name: str | None = None,
) -> ValidationResult:
    """Validate a registration request.

    Args:
        username: Raw username.
        email: Raw email address.
        password: Plaintext password.
        full_name: Optional display name.

    Returns:
        A result whose ``errors`` is empty when the request is acceptable.
    """
    errors: dict[str, str] = {}
    username = normalize_username(username)
    email = normalize_email(email)

    missing = [name for name, value in (("username", username), ("email", email), ("password", password)) if not value]
    if missing:
        for name in missing:
            errors[name] = f"{name.capitalize()} is required"
        return ValidationResult(errors, summary="Username, email, and password are required")

    if len(password or "") < PASSWORD_MIN_LENGTH:
        errors["password"] = f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    _check_username(username, errors)
    _check_email(email, errors)
    _check_full_name(normalize_full_name(full_name), errors)
    return ValidationResult(errors)


def validate_login(identifier: str | None, password: str | None) -> ValidationResult:
    """Validate that both login fields are present."""
    errors: dict[str, str] = {}
    if not normalize_username(identifier):
        errors["username"] = "Username is required"
    if not password:
        errors["password"] = "Password is required"
    if errors:
        return ValidationResult(errors, summary="Username and password are required")
    return ValidationResult()


def validate_profile_update(full_name: str | None, email: str | None) -> ValidationResult:
    """Validate the optional fields of a profile update.

    Blank values mean "leave unchanged" and are not errors.
    """
    errors: dict[str, str] = {}
    normalized_email = normalize_email(email)
    if normalized_email:
        _check_email(normalized_email, errors)
    _check_full_name(normalize_full_name(full_name), errors)
    return ValidationResult(errors)
