"""
JSON error envelope and exception handlers.

Every failure leaves the API as {"error": "<message>"} — never a bare
FastAPI {"detail": ...} and never a stack trace.

  • HTTPException          → its status, {"error": detail}
  • RequestValidationError → 400 {"error": "Invalid input"}
  • sqlalchemy TimeoutError (pool exhausted) → 503
  • anything else          → 500 {"error": "Internal server error"}, with the
    security headers set here because this handler runs outside the
    middleware stack
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from javarank.core.config import settings
from javarank.middleware.security_headers import SECURITY_HEADERS

logger = logging.getLogger(__name__)

DB_UNAVAILABLE = "Database unavailable"


def store_unavailable(exc: BaseException | None = None) -> HTTPException:
    """503 for a failed data-store call. The cause is only shown in DEBUG."""
    detail: str | dict[str, str] = DB_UNAVAILABLE
    if settings.DEBUG and exc is not None:
        detail = {"error": DB_UNAVAILABLE, "detail": str(exc)}
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


def store_error(exc: BaseException, detail: str) -> HTTPException:
    """
    HTTP error for a failed store call on a read/write route.

    Pool exhaustion is a 503 like any unreachable store; other failures
    keep the route's own 500 message.
    """
    if isinstance(exc, PoolTimeoutError):
        return store_unavailable(exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


async def _http_exception_handler(
    _request: Request, exc: StarletteHTTPException,
) -> JSONResponse:
    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    logger.debug("Rejected payload on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid input"},
    )


async def _pool_timeout_handler(request: Request, _exc: PoolTimeoutError) -> JSONResponse:
    logger.error("Connection pool exhausted on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": DB_UNAVAILABLE},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
        headers=SECURITY_HEADERS,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(PoolTimeoutError, _pool_timeout_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
