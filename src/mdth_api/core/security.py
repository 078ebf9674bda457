"""JWT token issuance/verification and password hashing.

Uses PyJWT for JWT operations and passlib with bcrypt for password hashing.
The signing secret is supplied by the caller; nothing here reads settings.
"""

from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt with a fresh random salt.

    Args:
        password: The plaintext password to hash.

    Returns:
        The bcrypt-hashed password string.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a bcrypt hash.

    A malformed or unrecognised hash counts as a mismatch.

    Args:
        plain_password: The plaintext password to verify.
        hashed_password: The bcrypt hash to verify against.

    Returns:
        True if the password matches, False otherwise.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


class TokenClaims(BaseModel):
    """Identity claims embedded in an access token."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId", min_length=1)
    username: str
    email: str


def create_access_token(
    claims: dict,
    secret_key: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Create a signed JWT access token.

    Args:
        claims: Claims to embed in the token.
        secret_key: Secret key for signing.
        algorithm: JWT signing algorithm.
        expires_hours: Token lifetime in hours.

    Returns:
        The encoded JWT string.
    """
    now = datetime.now(UTC)
    payload = {
        **claims,
        "iat": now,
        "exp": now + timedelta(hours=expires_hours),
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> dict:
    """Decode and validate a JWT token.

    Args:
        token: The JWT string to decode.
        secret_key: Secret key used for signing.
        algorithm: JWT signing algorithm.

    Returns:
        The decoded token payload.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is invalid.
    """
    return jwt.decode(token, secret_key, algorithms=[algorithm])


class TokenService:
    """Issues and verifies stateless bearer tokens.

    Tokens carry ``userId``, ``username`` and ``email`` and expire a fixed
    number of hours after issuance.  There is no revocation list.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_hours: int = 24) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expires_hours = expires_hours

    def issue(self, claims: TokenClaims) -> str:
        """Sign ``claims`` into a token valid for ``expires_hours``."""
        return create_access_token(
            claims.model_dump(by_alias=True),
            secret_key=self._secret_key,
            algorithm=self._algorithm,
            expires_hours=self.expires_hours,
        )

    def verify(self, token: str) -> TokenClaims | None:
        """Return the token's claims, or None if it is invalid.

        Bad signatures, expired tokens, malformed tokens and tokens missing
        identity claims are all treated the same way.
        """
        try:
            payload = decode_token(token, self._secret_key, self._algorithm)
            return TokenClaims.model_validate(payload)
        except (jwt.PyJWTError, PydanticValidationError):
            return None
