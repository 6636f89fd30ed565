"""
Error Handler Middleware

Provides consistent error handling and response formatting.
Logs errors with correlation IDs for debugging. Domain errors are
mapped to status codes by exception handlers; anything else becomes
a sanitized 500.
"""

import traceback
from uuid import uuid4

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from saathi.config.logging_config import bind_correlation_id, clear_context, get_logger
from saathi.domain.exceptions import (
    ActiveSessionExistsError,
    InputError,
    InvalidSessionStateError,
    RiskComputationError,
    SaathiError,
    SessionNotFoundError,
    TurnInProgressError,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Most specific first
ERROR_STATUS: tuple[tuple[type[SaathiError], int, str], ...] = (
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND, "session_not_found"),
    (InvalidSessionStateError, status.HTTP_409_CONFLICT, "invalid_session_state"),
    (TurnInProgressError, status.HTTP_409_CONFLICT, "turn_in_progress"),
    (ActiveSessionExistsError, status.HTTP_409_CONFLICT, "active_session_exists"),
    (InputError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_input"),
    (RiskComputationError, status.HTTP_500_INTERNAL_SERVER_ERROR, "risk_computation_failed"),
)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Provides:
    - Correlation ID tracking for all requests
    - Consistent error response format
    - Error logging with context
    - Sensitive data protection in errors
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with error handling."""

        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
        bind_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id
            return response

        except Exception as e:
            logger.error(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error_type=type(e).__name__,
                traceback=traceback.format_exc(),
            )

            # Sanitized response; no exception text leaves the service
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "internal_error",
                    "correlation_id": correlation_id,
                    "message": "An unexpected error occurred. Please try again.",
                },
                headers={CORRELATION_HEADER: correlation_id},
            )

        finally:
            clear_context()


def _status_for(error: SaathiError) -> tuple[int, str]:
    for error_type, status_code, code in ERROR_STATUS:
        if isinstance(error, error_type):
            return status_code, code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "internal_error"


async def saathi_error_handler(request: Request, exc: SaathiError) -> JSONResponse:
    """Map a domain error to its status code."""
    status_code, code = _status_for(exc)
    correlation_id = request.headers.get(CORRELATION_HEADER)

    if status_code >= 500:
        logger.error(
            "Request failed with domain error",
            path=request.url.path,
            error_type=type(exc).__name__,
        )
        message = "The request could not be completed safely. Please try again."
    else:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=status_code,
        )
        message = str(exc)

    return JSONResponse(
        status_code=status_code,
        content={"error": code, "message": message, "correlation_id": correlation_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SaathiError, saathi_error_handler)
