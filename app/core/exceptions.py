"""
Domain errors and their mapping to the API error envelope.

Every error that reaches a client is rendered as::

    {"error": {"code": "INVALID_TOKEN", "message": "Invalid or expired refresh token"}}

Auth failures keep a private ``reason`` (e.g. ``"user_not_found"``,
``"revoked"``) for logs. Only ``code`` and ``message`` are serialized, so
"no such user" and "wrong password" look identical from outside.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors rendered as ``{"error": {code, message}}``."""

    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, *, reason: Optional[str] = None):
        self.message = message or self.message
        self.reason = reason
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}


# ─── Auth ────────────────────────────────────


class InvalidCredentialsError(AppError):
    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, *, reason: Optional[str] = None):
        # The external message is fixed on purpose.
        super().__init__(reason=reason)


class AccountDisabledError(AppError):
    code = "ACCOUNT_DISABLED"
    message = "Account is disabled"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidTokenError(AppError):
    code = "INVALID_TOKEN"
    message = "Invalid or expired refresh token"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, *, reason: Optional[str] = None):
        super().__init__(reason=reason)


class ConflictError(AppError):
    """Refresh token hash collision on insert. Retried internally, never shown."""

    code = "CONFLICT"
    message = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(AppError):
    code = "UNAUTHORIZED"
    message = "Authentication required"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    code = "FORBIDDEN"
    message = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


# ─── Resources ───────────────────────────────


class NotFoundError(AppError):
    code = "NOT_FOUND"
    message = "Resource not found"
    status_code = status.HTTP_404_NOT_FOUND


class UserExistsError(AppError):
    code = "USER_EXISTS"
    message = "Email already registered"
    status_code = status.HTTP_409_CONFLICT


class BadRequestError(AppError):
    code = "BAD_REQUEST"
    message = "Bad request"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code


class RateLimitExceededError(AppError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Too many requests. Try again in {retry_after} seconds.")


# ─── Handlers ────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.reason:
        logger.info(f"{exc.code} on {request.method} {request.url.path} (reason={exc.reason})")
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else "Invalid request body"
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"error": {"code": "VALIDATION_ERROR", "message": message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error-envelope handlers to an application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
