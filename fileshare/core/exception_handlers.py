"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses -> status from their ErrorKind (400, 404, 410, 429, 500)
- Unexpected Exception -> generic 500 (safety net)
- Body shape: {"error": <message>, "code": <code>, "request_id": <id>}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fileshare.core.errors import AppError, ErrorKind, RateLimitedAppError
from fileshare.core.logging import get_request_id

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Server error"


def _error_body(code: str, message: str) -> dict:
    return {"error": message, "code": code, "request_id": get_request_id()}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a tagged AppError with the status of its kind.

    Internal errors never echo details to the client; they were logged
    where they were raised.
    """
    status_code = exc.kind.http_status
    log = logger.error if exc.kind is ErrorKind.INTERNAL else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_kind": exc.kind.value,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    if exc.kind is ErrorKind.INTERNAL:
        content = _error_body(exc.code, GENERIC_SERVER_ERROR)
    else:
        content = _error_body(exc.code, exc.message)
        if exc.details:
            content["details"] = exc.details

    headers = exc.headers if isinstance(exc, RateLimitedAppError) else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure with its type and message, returns a generic body with
    no stack trace or exception text.
    """
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content=_error_body("internal_server_error", GENERIC_SERVER_ERROR),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
