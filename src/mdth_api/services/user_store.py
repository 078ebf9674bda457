"""Persistent user records.

Wraps an ``AsyncSession`` and enforces the account invariants: username and
email are unique among all users (active or not), and accounts are only ever
soft-deleted.  The unique indexes on ``users`` are the authoritative guard;
the pre-insert lookups only give a friendlier error in the common case.
"""

import uuid
from typing import Any

from loguru import logger
from sqlalchemy import case, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mdth_api.lib.validators import normalize_email, normalize_username
from mdth_api.models.user import ROLE_USER, ROLES, User

_UPDATABLE_PROFILE_FIELDS: frozenset[str] = frozenset({"full_name", "email"})


class DuplicateUserError(ValueError):
    """Raised when a username or email is already taken."""


class UserNotFoundError(LookupError):
    """Raised when no user exists with the requested id."""


class UserStore:
    """Data access for ``User`` records bound to one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        full_name: str | None = None,
        role: str = ROLE_USER,
    ) -> User:
        """Insert a new active user.

        Args:
            username: Username; surrounding whitespace is stripped.
            email: Email address; stripped and lower-cased.
            password_hash: Already-hashed password.
            full_name: Optional display name.
            role: Initial role.

        Returns:
            The created User.

        Raises:
            DuplicateUserError: If the username or email already exists,
                including when a concurrent insert wins the race.
        """
        username = normalize_username(username)
        email = normalize_email(email)

        existing = await self._session.execute(
            select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            msg = "Username or email already exists"
            raise DuplicateUserError(msg)

        user = User(
            username=username,
            email=email,
            hashed_password=password_hash,
            full_name=full_name,
            role=role,
            is_active=True,
        )
        self._session.add(user)
        await self._commit_unique("Username or email already exists")
        await self._session.refresh(user)
        logger.info(f"Created user {user.id} ({username})")
        return user

    async def find_by_username_or_email(self, identifier: str, *, active_only: bool = True) -> User | None:
        """Look up a user whose username or email matches ``identifier``.

        A username match wins over an email match.
        """
        username = normalize_username(identifier)
        email = normalize_email(identifier)
        query = (
            select(User)
            .where(or_(User.username == username, User.email == email))
            .order_by(case((User.username == username, 0), else_=1))
            .limit(1)
        )
        if active_only:
            query = query.where(User.is_active.is_(True))
        result = await self._session.execute(query)
        return result.scalars().first()

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def email_taken(self, email: str, *, exclude_id: uuid.UUID | None = None) -> bool:
        """Whether any user other than ``exclude_id`` owns ``email``."""
        query = select(User.id).where(User.email == normalize_email(email))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self._session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def update_profile(self, user_id: uuid.UUID, patch: dict[str, Any]) -> User:
        """Apply a partial profile update.

        Only ``full_name`` and ``email`` are updatable; other keys are ignored.
        A changed email is re-checked for uniqueness against every other user.

        Raises:
            UserNotFoundError: If the user does not exist.
            DuplicateUserError: If the new email belongs to another user.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            msg = f"User {user_id} not found"
            raise UserNotFoundError(msg)

        updates = {k: v for k, v in patch.items() if k in _UPDATABLE_PROFILE_FIELDS}
        if "email" in updates:
            updates["email"] = normalize_email(updates["email"])
            if updates["email"] != user.email and await self.email_taken(updates["email"], exclude_id=user.id):
                msg = "Email already exists"
                raise DuplicateUserError(msg)

        for field, value in updates.items():
            setattr(user, field, value)

        await self._commit_unique("Email already exists")
        await self._session.refresh(user)
        return user

    async def list_active(self) -> list[User]:
        """Return active users, newest first."""
        result = await self._session.execute(
            select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def soft_delete(self, user_id: uuid.UUID) -> User:
        """Mark a user inactive, leaving every other field untouched.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            msg = f"User {user_id} not found"
            raise UserNotFoundError(msg)
        user.is_active = False
        await self._session.commit()
        await self._session.refresh(user)
        logger.info(f"Soft-deleted user {user.id} ({user.username})")
        return user

    async def set_role(self, user_id: uuid.UUID, role: str) -> User:
        """Change a user's role.

        Raises:
            ValueError: If ``role`` is not a known role.
            UserNotFoundError: If the user does not exist.
        """
        if role not in ROLES:
            msg = f"Unknown role '{role}'"
            raise ValueError(msg)
        user = await self.find_by_id(user_id)
        if user is None:
            msg = f"User {user_id} not found"
            raise UserNotFoundError(msg)
        user.role = role
        await self._session.commit()
        await self._session.refresh(user)
        return user

    async def _commit_unique(self, conflict_message: str) -> None:
        """Commit, translating a unique-index violation into DuplicateUserError."""
        try:
            await self._session.commit()
        except IntegrityError:
            await self._session.rollback()
            raise DuplicateUserError(conflict_message) from None
