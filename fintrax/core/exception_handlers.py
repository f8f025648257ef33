"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return the standard response envelope with the
proper HTTP status code.

Design:
- AppError subclasses -> mapped HTTP status (400, 401, 403, 404, 409, 429, 500)
- Request validation errors -> 400 "Invalid request"
- HTTPException -> its own status
- Unexpected Exception -> generic 500 (safety net)
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fintrax.core.errors import (
    AppError,
    AuthenticationAppError,
    ConflictAppError,
    DeliveryAppError,
    ForbiddenAppError,
    NotFoundAppError,
    RateLimitedAppError,
    ValidationAppError,
)
from fintrax.core.logging import get_request_id
from fintrax.core.responses import respond

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (ValidationAppError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationAppError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenAppError, status.HTTP_403_FORBIDDEN),
    (NotFoundAppError, status.HTTP_404_NOT_FOUND),
    (ConflictAppError, status.HTTP_409_CONFLICT),
    (RateLimitedAppError, status.HTTP_429_TOO_MANY_REQUESTS),
    (DeliveryAppError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: AppError) -> int:
    """Return the HTTP status for a domain error (400 when unmapped)."""

    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with the standard envelope.

    Rate limit rejections are routine decisions, so they carry no error
    payload; every other domain error reports its code and details.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    if isinstance(exc, RateLimitedAppError):
        return respond(status_code, exc.message)

    error_content = {"code": exc.code}
    if exc.details:
        error_content["details"] = exc.details

    return respond(status_code, exc.message, error=error_content)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Translate pydantic request validation failures into a 400 envelope."""

    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(errors),
            "request_id": get_request_id(),
        },
    )
    return respond(status.HTTP_400_BAD_REQUEST, "Invalid request", error=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap framework HTTP errors (404 route, 405 method, ...) in the envelope."""

    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return respond(exc.status_code, message, headers=getattr(exc, "headers", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Catches any exception not handled by specific handlers.
    Logs detailed information for debugging while returning generic message.
    Prevents information leakage (no stack traces to client).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return respond(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        error={"code": "internal_server_error", "request_id": get_request_id()},
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization, before route registration.
    Order matters: specific handlers registered before general fallback.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(validation_error_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
