"""Account API endpoints.

POST /register, POST /login, POST /verify-token, GET/PUT /profile,
GET /users, DELETE /users/{user_id}, GET /health.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from mdth_api.core.dependencies import get_account_service, get_token_claims
from mdth_api.core.security import TokenClaims
from mdth_api.schemas.auth import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RegisterRequest,
    UserListResponse,
    UserProfile,
    UserPublic,
    VerifyTokenResponse,
)
from mdth_api.services.account_service import AccountService

router = APIRouter(tags=["accounts"])

_AUTH_ERRORS: dict[int | str, dict] = {
    401: {"model": ErrorResponse, "description": "Access token required"},
    403: {"model": ErrorResponse, "description": "Invalid or expired token"},
}


@router.get("/health", status_code=200)
async def health_check() -> dict:
    """Health check endpoint (no authentication required)."""
    return {"status": "healthy"}


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    request: RegisterRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> AuthResponse:
    """Create an account and return a bearer token for it."""
    token, user = await service.register(request.username, request.email, request.password, request.full_name)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post(
    "/login",
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def login(
    request: LoginRequest,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> AuthResponse:
    """Authenticate with a username or email and a password."""
    token, user = await service.login(request.username, request.password)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post("/verify-token", responses=_AUTH_ERRORS)
async def verify_token(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
) -> VerifyTokenResponse:
    """Confirm a token is valid and echo its claims."""
    return VerifyTokenResponse(valid=True, user=AccountService.verify_token(claims))


@router.get("/profile", responses={**_AUTH_ERRORS, 404: {"model": ErrorResponse}})
async def get_profile(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ProfileResponse:
    """Return the authenticated user's profile."""
    user = await service.get_profile(claims.user_id)
    return ProfileResponse(user=UserProfile.model_validate(user))


@router.put(
    "/profile",
    responses={**_AUTH_ERRORS, 400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_profile(
    request: ProfileUpdateRequest,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ProfileUpdateResponse:
    """Update the authenticated user's full name and/or email."""
    user = await service.update_profile(claims.user_id, full_name=request.full_name, email=request.email)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserProfile.model_validate(user),
    )


@router.get("/users", responses=_AUTH_ERRORS)
async def list_users(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> UserListResponse:
    """List active users, newest first (admin only)."""
    users = await service.admin_list_users(claims.user_id)
    return UserListResponse(users=[UserProfile.model_validate(u) for u in users])


@router.delete("/users/{user_id}", responses={**_AUTH_ERRORS, 404: {"model": ErrorResponse}})
async def delete_user(
    user_id: str,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> MessageResponse:
    """Soft-delete a user (admin only)."""
    await service.admin_delete_user(claims.user_id, user_id)
    return MessageResponse(message="User deleted successfully")
