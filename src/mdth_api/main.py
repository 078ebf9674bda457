"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.  Every error response is JSON with an ``error`` field.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from mdth_api import __version__
from mdth_api.core.config import get_settings
from mdth_api.core.database import create_tables, dispose_engine, init_engine
from mdth_api.core.errors import AccountError, ValidationError
from mdth_api.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: init engine on startup, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    if settings.uses_default_secret:
        logger.warning("JWT_SECRET_KEY is not set; using the development secret")
    init_engine(settings.database_url, echo=False)
    if settings.database_auto_create:
        await create_tables()
    logger.info(f"MDTH accounts API {__version__} ready")

    yield

    await dispose_engine()


def _field_errors(exc: RequestValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields[".".join(loc) or "body"] = error.get("msg", "Invalid value")
    return fields


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": ...}`` JSON.

    Args:
        app: The FastAPI application.
    """

    @app.exception_handler(AccountError)
    async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
        content: dict = {"error": exc.message}
        if isinstance(exc, ValidationError) and exc.fields:
            content["fields"] = exc.fields
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "fields": _field_errors(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error(f"Unhandled exception on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="MDTH Accounts API",
        description="User accounts for the MDTH educational platform: registration, login, profiles, admin",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Register middleware and routers
    from mdth_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
