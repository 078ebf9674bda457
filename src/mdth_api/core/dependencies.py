"""FastAPI dependency injection for sessions, services, and bearer-token auth.

``get_token_claims`` is the authentication guard for protected routes.  It
only inspects the ``Authorization`` header and trusts the verified claims as
they are; it never reloads the user.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mdth_api.core.config import Settings, get_settings
from mdth_api.core.database import get_session_factory
from mdth_api.core.errors import AuthError, InvalidTokenError
from mdth_api.core.security import TokenClaims, TokenService
from mdth_api.services.account_service import AccountService
from mdth_api.services.user_store import UserStore


class AuthorizationToken(HTTPBearer):
    """Bearer security scheme that yields the raw token from ``Authorization``.

    The token is the second space-separated part of the header whatever the
    scheme word is, so ``Token abc`` yields ``abc`` and fails verification
    rather than counting as a missing token.
    """

    async def __call__(self, request: Request) -> str | None:  # type: ignore[override]
        parts = request.headers.get("Authorization", "").split(" ")
        if len(parts) < 2 or not parts[1]:
            return None
        return parts[1]


bearer_scheme = AuthorizationToken(auto_error=False)


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield an async database session with per-request lifecycle."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


def get_token_service(settings: Annotated[Settings, Depends(get_settings)]) -> TokenService:
    """Build the token service from the configured secret."""
    return TokenService(
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        expires_hours=settings.jwt_expire_hours,
    )


def get_user_store(session: Annotated[AsyncSession, Depends(get_async_session)]) -> UserStore:
    return UserStore(session)


def get_account_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AccountService:
    return AccountService(store, tokens)


async def get_token_claims(
    token: Annotated[str | None, Depends(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims:
    """Verify the bearer token and return its claims.

    Args:
        token: Token part of the ``Authorization`` header, if any.
        tokens: The token service.

    Returns:
        The verified token claims.

    Raises:
        AuthError: If no token was sent (401).
        InvalidTokenError: If a token was sent but is invalid or expired (403).
    """
    if token is None:
        raise AuthError("Access token required")
    claims = tokens.verify(token)
    if claims is None:
        raise InvalidTokenError
    return claims
