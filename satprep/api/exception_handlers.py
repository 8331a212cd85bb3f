"""
Global exception handlers for FastAPI.

Every error leaves as {"error": {"type", "message"}}.
"""

from typing import Tuple, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import structlog

from satprep.core.exceptions import (
    ConfigurationError,
    InvalidTransitionError,
    PoolExhaustionError,
    SatPrepError,
    SessionCompletedError,
    SessionNotFoundError,
    ValidationError,
)

log = structlog.get_logger(__name__)

# First match wins; anything unlisted is a 500
STATUS_CODES: Tuple[Tuple[Type[SatPrepError], int], ...] = (
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidTransitionError, status.HTTP_400_BAD_REQUEST),
    (SessionCompletedError, status.HTTP_400_BAD_REQUEST),
    (PoolExhaustionError, status.HTTP_409_CONFLICT),
)


def status_for(exc: SatPrepError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error(status_code: int, error_type: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"type": error_type, "message": message}},
    )


def setup_exception_handlers(app: FastAPI):
    """Register the error envelope handlers with the application."""

    @app.exception_handler(SatPrepError)
    async def satprep_error_handler(request: Request, exc: SatPrepError) -> JSONResponse:
        status_code = status_for(exc)
        log.warning(
            "request_error",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            message=exc.message,
            status_code=status_code,
        )
        if isinstance(exc, ConfigurationError):
            return _error(status_code, "ConfigurationError", "Server configuration error")
        return _error(status_code, type(exc).__name__, exc.message)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "InternalServerError",
            "An unexpected error occurred",
        )
