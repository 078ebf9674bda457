"""User model for account authentication and role-based access control."""

from sqlalchemy import Boolean, String, true
from sqlalchemy.orm import Mapped, mapped_column

from mdth_api.models.base import Base, TimestampMixin, UUIDMixin

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES: frozenset[str] = frozenset({ROLE_USER, ROLE_ADMIN})


class User(Base, UUIDMixin, TimestampMixin):
    """A platform account.  Soft-deleted accounts keep ``is_active=False``."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_USER, server_default=ROLE_USER)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
