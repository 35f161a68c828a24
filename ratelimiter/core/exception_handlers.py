"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses → status code from ``STATUS_BY_ERROR`` (400 otherwise)
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ratelimiter.core.errors import (
    AppError,
    ConfigurationAppError,
    InvalidRemoteAddressError,
    RateLimitExceededError,
    StoreError,
)
from ratelimiter.core.logging import get_request_id

logger = logging.getLogger(__name__)

# Checked in order; first isinstance match wins
STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (RateLimitExceededError, 429),
    (InvalidRemoteAddressError, 500),
    (StoreError, 503),
    (ConfigurationAppError, 500),
)


def status_for(exc: AppError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    All responses include:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = status_for(exc)

    # Rejections are already logged by the rate limit dependency
    if not isinstance(exc, RateLimitExceededError):
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

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure and returns a generic message without implementation
    details.
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

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
