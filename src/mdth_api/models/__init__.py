"""ORM model registry: import all models so Alembic autogenerate discovers them."""

from mdth_api.models.base import Base
from mdth_api.models.user import User

__all__ = [
    "Base",
    "User",
]
