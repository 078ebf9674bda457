"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
Every setting has a default suitable for local development.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEV_JWT_SECRET = "dev-secret-key-change-this-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",  # noqa: S104
        description="Bind host for the API server",
    )
    port: int = Field(
        default=3000,
        description="Bind port for the API server",
        gt=0,
        le=65535,
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./mdth_platform.db",
        description="SQLAlchemy async connection string",
    )
    database_auto_create: bool = Field(
        default=True,
        description="Create missing tables on startup (use Alembic migrations in production)",
    )

    # JWT
    jwt_secret_key: str = Field(
        default=_DEV_JWT_SECRET,
        min_length=32,
        description="Secret key for signing JWTs (minimum 32 characters)",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expire_hours: int = Field(
        default=24,
        description="Access token lifetime in hours",
        gt=0,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # API
    api_prefix: str = Field(
        default="/api",
        description="Path prefix for all API routes",
    )

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            msg = "api_prefix must start with '/'"
            raise ValueError(msg)
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def uses_default_secret(self) -> bool:
        """Whether the development JWT secret is still in use."""
        return self.jwt_secret_key == _DEV_JWT_SECRET


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
