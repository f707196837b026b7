"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError, NotFoundAppError, malformed requests → 400
- RateLimitAppError → 429 (with Retry-After / X-RateLimit-* headers)
- StorageAppError → 500
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from recordstore.core.config import settings
from recordstore.core.errors import AppError, RateLimitAppError, StorageAppError
from recordstore.core.logging import get_request_id
from recordstore.core.rate_limit import build_rate_limit_headers

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map an engine error to its HTTP status code."""
    if isinstance(exc, RateLimitAppError):
        return 429
    if isinstance(exc, StorageAppError):
        return 500
    # Validation and not-found errors are caller input problems
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle record store errors with a consistent JSON body.

    The body is ``{"error": {"code", "message", "request_id", "details"?}}``.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
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

    headers = None
    app_settings = getattr(request.app.state, "settings", settings)
    if isinstance(exc, RateLimitAppError) and app_settings.rate_limit.include_headers:
        headers = build_rate_limit_headers(exc)

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies or path parameters as 400 Bad Request."""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": str(error.get("msg", "")),
        }
        for error in exc.errors()
    ]
    logger.warning(
        "request_validation_failed",
        extra={
            "error_count": len(errors),
            "request_path": request.url.path,
            "request_id": get_request_id(),
        },
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "invalid_request",
                "message": "Request body or parameters are malformed",
                "request_id": get_request_id(),
                "details": {"errors": errors},
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure and returns a generic message without leaking details.
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
    """Register all exception handlers with a FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
