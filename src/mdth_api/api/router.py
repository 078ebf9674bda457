"""Root API router with the configured prefix and middleware registration."""

from fastapi import APIRouter, FastAPI

from mdth_api.api.middleware import SecurityHeadersMiddleware, setup_cors
from mdth_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Create the root API router with all sub-routers included.

    Args:
        settings: Application settings.

    Returns:
        Configured API router.
    """
    from mdth_api.api.v1.accounts import router as accounts_router

    root_router = APIRouter(prefix=settings.api_prefix)
    root_router.include_router(accounts_router)
    return root_router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware on the FastAPI app.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    # CORS must wrap SecurityHeadersMiddleware, including its 500 responses
    app.add_middleware(SecurityHeadersMiddleware, api_prefix=settings.api_prefix)
    setup_cors(app, settings)
