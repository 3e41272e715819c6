"""
Global Exception Handlers for the FastAPI Application.

Every error response has ``"success": false`` and a human-readable
``detail``:

- ``CitadelPowError``: the error's status, plus ``code`` and ``details``
- ``HTTPException``: the exception's status and headers
- ``RequestValidationError``: 400 ``Invalid request body`` with ``errors``
- ``BlinkApiError`` / ``DiscordApiError``: 502
- anything else: 500 with an ``error_id`` to quote when reporting the issue
"""

import traceback
import uuid

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from citadel_pow.core.errors import CitadelPowError
from citadel_pow.core.logging_config import get_logger
from citadel_pow.core.monitoring import log_error
from citadel_pow.integrations.blink import BlinkApiError
from citadel_pow.integrations.discord import DiscordApiError

logger = get_logger(__name__)


async def domain_exception_handler(request: Request, exc: CitadelPowError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(
            {"success": False, "detail": exc.message, "code": exc.code, "details": exc.details}
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info(f"Invalid request body for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"success": False, "detail": "Invalid request body", "errors": exc.errors()}),
    )


async def upstream_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a failed call to Blink or Discord as 502."""
    upstream = "Blink" if isinstance(exc, BlinkApiError) else "Discord"
    logger.error(f"{upstream} API error in {request.method} {request.url.path}: {exc}")
    log_error(
        type(exc).__name__,
        str(exc),
        {"path": request.url.path, "upstream_status": getattr(exc, "status_code", None)},
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"success": False, "detail": f"{upstream} API error: {exc}"},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception with its request context.

    The response carries an error ID that clients can use to reference the
    error when reporting issues.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = uuid.uuid4().hex[:12]

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {str(exc)}",
        exc_info=True,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": traceback.format_exc(),
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(CitadelPowError, domain_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BlinkApiError, upstream_exception_handler)
    app.add_exception_handler(DiscordApiError, upstream_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
