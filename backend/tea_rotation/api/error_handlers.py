"""Error Handlers — global exception handlers for the tea rotation API.

Invariants:
    - TeaRotationError → its own http_status with {"error": message, "code": ...}
    - RequestValidationError → 400 with field-level error details
    - Exception (catch-all) → 500, never leaks internal details; api/middleware.py
      answers the same body from inside the CORS layer
    - Every error body carries the human-readable message under "error"
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from tea_rotation.core.errors import TeaRotationError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TeaRotationError)
    async def tea_rotation_error_handler(request: Request, exc: TeaRotationError):
        """Handle all tea rotation domain/infrastructure errors."""
        logger.error(
            f"TeaRotationError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all for errors raised outside UnhandledErrorMiddleware."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=internal_error_response(),
        )


def internal_error_response() -> dict:
    """Generic 500 body. Never leaks internal details."""
    return {
        "error": "An unexpected error occurred",
        "code": "INTERNAL_ERROR",
        "category": "internal",
        "severity": ErrorSeverity.CRITICAL.value,
    }


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": "Invalid request data",
        "code": "VALIDATION_ERROR",
        "category": "validation",
        "severity": ErrorSeverity.ERROR.value,
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
