"""Middleware for the Immuse API: CORS, request logging and error mapping.

# ─── MIDDLEWARE EXECUTION ORDER ───────────────────────────────────────
#
# Starlette middleware is a stack (last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)    # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd → outer
#
#   Request flow:   Client → RequestLogging → ErrorHandling → route
#
# So RequestLoggingMiddleware sees the final status code, including the
# JSON error responses produced by ErrorHandlingMiddleware.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from immuse.api.schemas import ErrorResponse
from immuse.utils.errors import (
    ConfigurationError,
    ExternalServiceError,
    ImmuseError,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
)
from immuse.utils.logging import bind_request_context, clear_request_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Most specific first; anything not listed maps to 500.
_STATUS_BY_ERROR: tuple[tuple[type[ImmuseError], int], ...] = (
    (InputValidationError, 400),
    (InvalidStateError, 400),
    (NotFoundError, 404),
    (ExternalServiceError, 502),
    (ConfigurationError, 500),
)


def status_for(exc: ImmuseError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]``; the
        wizard frontend is usually served from another origin in
        development.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials together with a wildcard origin.
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request and tag its log events with a request id.

    The id comes from the ``X-Request-ID`` header when the client sends one
    and is echoed back on the response.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        clear_request_context()
        bind_request_context(request_id=request_id)
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert exceptions escaping the routes into JSON error bodies.

    ``ImmuseError`` subclasses keep their message and get the status from
    ``_STATUS_BY_ERROR``.  Anything else becomes an opaque 500; the stack
    trace is logged server-side only.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except ImmuseError as exc:
            status_code = status_for(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            details = exc.details if isinstance(exc, InputValidationError) and exc.details else None
            body = ErrorResponse(error=exc.message, code=type(exc).__name__, details=details)
            return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))
        except Exception:
            _logger.exception("unhandled_error", path=str(request.url.path))
            body = ErrorResponse(error="Internal server error", code="InternalError")
            return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


# ---------------------------------------------------------------------------
# Request validation (422 → 400) and HTTPException bodies
# ---------------------------------------------------------------------------


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    _logger.info("request_validation_failed", path=str(request.url.path), errors=len(exc.errors()))
    body = ErrorResponse(
        error="Validation error",
        code="InputValidationError",
        details=jsonable_encoder(exc.errors()),
    )
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = ErrorResponse(error=str(exc.detail), code=f"HTTP{exc.status_code}")
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Render validation failures and HTTPExceptions in the ErrorResponse shape."""
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
