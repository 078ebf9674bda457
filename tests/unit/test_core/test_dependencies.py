"""Tests for FastAPI dependency injection module."""

from unittest.mock import MagicMock

import pytest
from starlette.requests import Request

from mdth_api.core.config import Settings
from mdth_api.core.dependencies import (
    bearer_scheme,
    get_account_service,
    get_token_claims,
    get_token_service,
    get_user_store,
)
from mdth_api.core.errors import AuthError, InvalidTokenError
from mdth_api.core.security import TokenClaims, TokenService
from mdth_api.services.account_service import AccountService
from mdth_api.services.user_store import UserStore

SECRET = "test-secret-key-for-testing-32chars"


def _request(authorization: str | None) -> Request:
    headers = [] if authorization is None else [(b"authorization", authorization.encode())]
    return Request({"type": "http", "method": "GET", "path": "/api/profile", "headers": headers})


class TestBearerScheme:
    """Tests for extracting the token from the Authorization header."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("authorization", "expected"),
        [
            (None, None),
            ("", None),
            ("Bearer", None),
            ("Bearer ", None),
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("Token abc.def.ghi", "abc.def.ghi"),
            ("Basic dXNlcjpwYXNz", "dXNlcjpwYXNz"),
        ],
    )
    async def test_token_is_second_header_part(self, authorization: str | None, expected: str | None) -> None:
        assert await bearer_scheme(_request(authorization)) == expected


class TestGetTokenClaims:
    """Tests for the bearer-token guard."""

    @pytest.mark.asyncio
    async def test_missing_token_is_401(self) -> None:
        with pytest.raises(AuthError) as exc_info:
            await get_token_claims(token=None, tokens=TokenService(SECRET))
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Access token required"

    @pytest.mark.asyncio
    async def test_invalid_token_is_403(self) -> None:
        with pytest.raises(InvalidTokenError) as exc_info:
            await get_token_claims(token="not-a-token", tokens=TokenService(SECRET))
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_token_from_other_secret_is_403(self) -> None:
        claims = TokenClaims(user_id="u-1", username="alice", email="a@x.com")
        token = TokenService("another-secret-key-that-is-long-enough").issue(claims)
        with pytest.raises(InvalidTokenError):
            await get_token_claims(token=token, tokens=TokenService(SECRET))

    @pytest.mark.asyncio
    async def test_valid_token_returns_claims(self) -> None:
        service = TokenService(SECRET)
        claims = TokenClaims(user_id="u-1", username="alice", email="a@x.com")
        result = await get_token_claims(token=service.issue(claims), tokens=service)
        assert result == claims


class TestServiceFactories:
    """Tests for the service dependency factories."""

    def test_token_service_uses_settings(self) -> None:
        settings = Settings(_env_file=None, jwt_secret_key=SECRET, jwt_expire_hours=12)
        service = get_token_service(settings)
        assert service.expires_hours == 12
        claims = TokenClaims(user_id="u-1", username="alice", email="a@x.com")
        assert TokenService(SECRET).verify(service.issue(claims)) == claims

    def test_account_service_composes_store_and_tokens(self) -> None:
        store = get_user_store(MagicMock())
        assert isinstance(store, UserStore)
        service = get_account_service(store, TokenService(SECRET))
        assert isinstance(service, AccountService)
