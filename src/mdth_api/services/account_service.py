"""Account orchestration: registration, login, profiles, and admin actions.

Composes the user store, the token service and the password hasher, and
translates their failures into the ``mdth_api.core.errors`` taxonomy.  Any
failure that has no more specific mapping is logged and raised as
``InternalError``.
"""

import asyncio
import secrets
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from loguru import logger

from mdth_api.core.errors import (
    AccountError,
    AuthError,
    ConflictError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from mdth_api.core.security import TokenClaims, TokenService, hash_password, verify_password
from mdth_api.lib.validators import (
    normalize_email,
    normalize_full_name,
    validate_login,
    validate_profile_update,
    validate_registration,
)
from mdth_api.models.user import ROLE_USER, User
from mdth_api.services.user_store import DuplicateUserError, UserNotFoundError, UserStore


def _parse_user_id(value: str | uuid.UUID) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


@lru_cache(maxsize=1)
def _unmatchable_hash() -> str:
    """Hash of a random secret, checked against when no account matches a login."""
    return hash_password(secrets.token_urlsafe(32))


@contextmanager
def _internal_errors(operation: str) -> Iterator[None]:
    """Re-raise unexpected exceptions as InternalError after logging them."""
    try:
        yield
    except AccountError:
        raise
    except Exception as exc:
        logger.exception(f"{operation} failed: {exc}")
        raise InternalError from exc


class AccountService:
    """Account use cases for the HTTP API and the CLI."""

    def __init__(self, store: UserStore, tokens: TokenService) -> None:
        self._store = store
        self._tokens = tokens

    def issue_token(self, user: User) -> str:
        """Issue a bearer token carrying the user's identity claims."""
        return self._tokens.issue(TokenClaims(user_id=str(user.id), username=user.username, email=user.email))

    async def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
        full_name: str | None = None,
        *,
        role: str = ROLE_USER,
    ) -> tuple[str, User]:
        """Create an account and issue its first token.

        ``role`` is only set by the CLI; the HTTP API always registers plain
        users.

        Returns:
            Tuple of (token, created user).

        Raises:
            ValidationError: On missing, short or malformed input.
            ConflictError: If the username or email is taken.
            InternalError: On unexpected store or hashing failures.
        """
        result = validate_registration(username, email, password, full_name)
        if not result.ok:
            raise ValidationError(result.message, fields=result.errors)

        with _internal_errors("Registration"):
            password_hash = await asyncio.to_thread(hash_password, password)
            try:
                user = await self._store.create(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                    full_name=normalize_full_name(full_name),
                    role=role,
                )
            except DuplicateUserError as e:
                raise ConflictError("Username or email already exists") from e
            token = self.issue_token(user)

        logger.info(f"Registered user {user.id} ({user.username})")
        return token, user

    async def login(self, identifier: str | None, password: str | None) -> tuple[str, User]:
        """Authenticate by username or email and issue a token.

        Unknown identifiers, soft-deleted accounts and wrong passwords all
        fail with the same ``AuthError``, and all of them run one bcrypt
        verification.

        Returns:
            Tuple of (token, authenticated user).
        """
        result = validate_login(identifier, password)
        if not result.ok:
            raise ValidationError(result.message, fields=result.errors)

        with _internal_errors("Login"):
            user = await self._store.find_by_username_or_email(identifier)
            stored_hash = user.hashed_password if user is not None else _unmatchable_hash()
            password_ok = await asyncio.to_thread(verify_password, password, stored_hash)
            if user is None:
                logger.warning("Login failed: no active account matches identifier")
                raise AuthError
            if not password_ok:
                logger.warning(f"Login failed for user {user.id}")
                raise AuthError
            token = self.issue_token(user)

        logger.info(f"Login: {user.username} ({user.id})")
        return token, user

    @staticmethod
    def verify_token(claims: TokenClaims) -> TokenClaims:
        """Echo verified claims back to the client."""
        return claims

    async def get_profile(self, user_id: str | uuid.UUID) -> User:
        """Load a user's own profile.

        Raises:
            NotFoundError: If the user no longer exists.
        """
        parsed = _parse_user_id(user_id)
        if parsed is None:
            raise NotFoundError
        with _internal_errors("Profile lookup"):
            user = await self._store.find_by_id(parsed)
        if user is None:
            raise NotFoundError
        return user

    async def update_profile(
        self,
        user_id: str | uuid.UUID,
        *,
        full_name: str | None = None,
        email: str | None = None,
    ) -> User:
        """Update ``full_name`` and/or ``email``; blank values are ignored.

        Setting the email to the user's current address is a no-op.

        Raises:
            ValidationError: On a malformed email or overlong name.
            NotFoundError: If the user does not exist.
            ConflictError: If the new email belongs to another account.
        """
        result = validate_profile_update(full_name, email)
        if not result.ok:
            raise ValidationError(result.message, fields=result.errors)

        parsed = _parse_user_id(user_id)
        if parsed is None:
            raise NotFoundError

        patch: dict[str, str] = {}
        if normalize_full_name(full_name) is not None:
            patch["full_name"] = normalize_full_name(full_name)
        if normalize_email(email):
            patch["email"] = normalize_email(email)

        with _internal_errors("Profile update"):
            try:
                user = await self._store.update_profile(parsed, patch)
            except UserNotFoundError as e:
                raise NotFoundError from e
            except DuplicateUserError as e:
                raise ConflictError("Email already exists") from e

        logger.info(f"Updated profile of user {user.id} (fields: {sorted(patch)})")
        return user

    async def admin_list_users(self, caller_id: str | uuid.UUID) -> list[User]:
        """List active users, newest first (admin only).

        Raises:
            ForbiddenError: If the caller is not an active admin.
        """
        with _internal_errors("User listing"):
            await self._require_admin(caller_id)
            return await self._store.list_active()

    async def admin_delete_user(self, caller_id: str | uuid.UUID, target_id: str | uuid.UUID) -> User:
        """Soft-delete a user (admin only).

        The role check runs first, so non-admins are refused whatever the
        target.

        Raises:
            ForbiddenError: If the caller is not an active admin.
            NotFoundError: If the target does not exist.
        """
        with _internal_errors("User deletion"):
            caller = await self._require_admin(caller_id)
            parsed = _parse_user_id(target_id)
            if parsed is None:
                raise NotFoundError
            try:
                user = await self._store.soft_delete(parsed)
            except UserNotFoundError as e:
                raise NotFoundError from e

        logger.info(f"Admin {caller.username} soft-deleted user {user.id} ({user.username})")
        return user

    async def _require_admin(self, caller_id: str | uuid.UUID) -> User:
        """Load the caller's live record and require an active admin."""
        parsed = _parse_user_id(caller_id)
        caller = await self._store.find_by_id(parsed) if parsed is not None else None
        if caller is None or not caller.is_active or not caller.is_admin:
            logger.warning(f"Admin access refused for caller {caller_id}")
            raise ForbiddenError
        return caller
