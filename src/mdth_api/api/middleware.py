"""CORS and security headers middleware."""

from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from mdth_api.core.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS middleware on the FastAPI app.

    A ``*`` entry allows any origin and turns credentials off.

    Args:
        app: The FastAPI application.
        settings: Application settings.
    """
    origins = settings.cors_origin_list
    if not origins:
        return
    kwargs: dict[str, Any] = {
        "allow_origins": origins,
        "allow_credentials": "*" not in origins,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }
    app.add_middleware(CORSMiddleware, **kwargs)


SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "no-referrer",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every response.

    Responses under ``api_prefix`` (tokens, profiles) are also marked
    ``Cache-Control: no-store``.  An exception escaping the app is logged and
    turned into the standard 500 body here, inside ``CORSMiddleware``, so the
    response still carries CORS headers.
    """

    def __init__(self, app: ASGIApp, api_prefix: str = "") -> None:
        super().__init__(app)
        self._api_prefix = api_prefix

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.opt(exception=exc).error(f"Unhandled exception on {request.method} {request.url.path}")
            response = JSONResponse(status_code=500, content={"error": "Internal server error"})
        response.headers.update(SECURITY_HEADERS)
        if request.url.path.startswith(f"{self._api_prefix}/"):
            response.headers.setdefault("Cache-Control", "no-store")
        return response
