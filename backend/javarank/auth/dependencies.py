"""
FastAPI dependencies for request-level security state.

The rate limiter and the CSRF token store live on app.state (built by
create_app), so every app instance owns its own counters and tokens.

CSRF flow:
  1. Client fetches GET /api/csrf-token
  2. Client echoes the token in the X-CSRF-Token header
  3. require_csrf_token rejects mutating requests with a missing or
     unknown/expired token — 403 before any business logic runs
"""

from __future__ import annotations

import logging

from fastapi import Header, HTTPException, Request, status

from javarank.services.csrf import CsrfTokenStore
from javarank.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

_CSRF_FAILED = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Invalid CSRF token",
)


def client_ip(request: Request) -> str:
    """Best-effort client identity for rate limiting."""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_csrf_store(request: Request) -> CsrfTokenStore:
    return request.app.state.csrf_tokens


async def require_csrf_token(
    request: Request,
    x_csrf_token: str | None = Header(default=None, alias="X-CSRF-Token"),
) -> None:
    """Reject the request unless it carries a currently valid CSRF token."""
    if request.method in ("GET", "HEAD", "OPTIONS"):
        return

    if not get_csrf_store(request).validate(x_csrf_token):
        logger.info(
            "CSRF check failed for %s %s from %s",
            request.method,
            request.url.path,
            client_ip(request),
        )
        raise _CSRF_FAILED
