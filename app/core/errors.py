"""
=============================================================================
CONTACT RELAY - ERROR HANDLING MODULE
=============================================================================
Global exception handlers for anything that escapes a route.

Features:
- Logs full stack trace server-side
- Returns the generic ApiResponse body, never exception details
- Answers methods the contact route does not register with its own 405 body
- Keeps the CORS header on error responses

Usage:
    # In main.py
    from app.core.errors import register_exception_handlers
    register_exception_handlers(app)
=============================================================================
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.cors import build_cors_headers
from app.schemas.contact import ApiResponse
from app.services.contact_handler import (
    METHOD_NOT_ALLOWED_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
)

logger = logging.getLogger(__name__)

CONTACT_ROUTE_PATH = f"{settings.API_V1_PREFIX}{settings.CONTACT_PATH}"


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(success=False, message=message).to_body(),
        headers=build_cors_headers(
            request.headers.get("origin"), settings.ALLOWED_ORIGINS
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def contact_method_handler(request: Request, exc: StarletteHTTPException):
        # HEAD, TRACE and extension methods never reach the contact route
        if exc.status_code == 405 and request.url.path == CONTACT_ROUTE_PATH:
            return _error_response(request, 405, METHOD_NOT_ALLOWED_MESSAGE)
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error_response(request, 500, UNEXPECTED_ERROR_MESSAGE)
