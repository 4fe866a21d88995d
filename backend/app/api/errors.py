"""
Error Handlers
Translate every failure into the response envelope.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import AppError

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Server error, please try again later"


def _envelope(status_code: int, message: str | None = None, errors: list[str] | None = None, headers=None) -> JSONResponse:
    content = {"success": False}
    if message is not None:
        content["message"] = message
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def format_validation_error(error: dict) -> str:
    """Human readable message for a single pydantic error."""
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
    if error.get("type") == "missing":
        return f"{field or 'body'} is required"
    if error.get("type") == "value_error":
        # Drop pydantic's "Value error, " prefix from our own validators
        return str(error.get("ctx", {}).get("error", error.get("msg")))
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(exc.status_code, exc.message, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [format_validation_error(error) for error in exc.errors()]
    return _envelope(400, "Validation failed", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    settings = request.app.state.settings
    message = str(exc) if settings.is_development else GENERIC_ERROR_MESSAGE
    return _envelope(500, message)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
