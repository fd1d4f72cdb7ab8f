"""HTTP middleware: request correlation, domain-error translation, CORS.

Registration order matters; Starlette runs the middleware added last first,
so a request passes RequestIDMiddleware, then ErrorHandlerMiddleware, then
CORS before reaching a route.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from property_settlement.domain.exceptions import (
    ClosedTransactionError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    SettlementError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

    from property_settlement.config import Settings

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Checked in order; the first matching class wins.
_STATUS_BY_ERROR: tuple[tuple[type[SettlementError], int, str], ...] = (
    (NotFoundError, 404, "request.not_found"),
    (InvalidStateError, 400, "request.invalid_state"),
    (InvalidInputError, 400, "request.invalid_input"),
    (ClosedTransactionError, 400, "request.transaction_closed"),
    (SettlementError, 400, "request.domain_error"),
)


def error_status(exc: SettlementError) -> tuple[int, str]:
    """Return the HTTP status and log event name for a domain error."""
    for error_type, status_code, event in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code, event
    return 400, "request.domain_error"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Bind a request id into structlog contextvars and echo it back."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn domain exceptions into ``{"error": code, "message": text}`` bodies.

    The message text is passed through verbatim; clients match on it.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except SettlementError as exc:
            status_code, event = error_status(exc)
            log_fields = {"code": exc.code, "error": exc.message}
            if isinstance(exc, InvalidStateError):
                log_fields.update(
                    operation=exc.operation,
                    current=exc.current_status,
                    expected=exc.expected,
                )
            logger.warning(event, status=status_code, **log_fields)
            return JSONResponse(
                status_code=status_code,
                content={"error": exc.code, "message": exc.message},
            )
        except Exception as exc:
            logger.exception("request.unhandled_error", error=str(exc))
            return JSONResponse(
                status_code=500,
                content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred"},
            )


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register CORS, error translation and request ids on ``app``."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIDMiddleware)
