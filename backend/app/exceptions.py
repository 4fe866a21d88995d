"""
Application Errors
Typed errors carrying an HTTP status; translated to the response envelope
by the handlers registered in app.main.
"""

from typing import List, Optional


class AppError(Exception):
    """Base error for anything the API reports to clients on purpose."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.errors = errors


class BadRequestError(AppError):
    status_code = 400


class UnauthorizedError(AppError):
    status_code = 401


class InvalidTokenError(UnauthorizedError):
    """Token signature, audience, issuer, expiry or shape is not acceptable."""


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409
