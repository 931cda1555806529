"""
FastAPI dependencies for per-route rate limit enforcement.

rate_limit(action, rule) builds a dependency that counts one attempt for
"<action>_<client-ip>" and raises 429 once the window is used up.

Order in request pipeline: GLOBAL LIMIT (middleware) → CSRF → RATE LIMIT →
payload validation → ROUTER LOGIC. The limit is therefore charged even
for requests whose payload later turns out to be invalid.

We intentionally do NOT expose remaining quota or retry-after headers
to avoid giving abuse scripts precise timing information.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from fastapi import HTTPException, Request, status

from javarank.auth.dependencies import client_ip, get_rate_limiter
from javarank.services.rate_limiter import RateLimitRule

logger = logging.getLogger(__name__)


def rate_limit(
    action: str,
    rule: RateLimitRule,
    detail: str = "Too many requests",
) -> Callable[[Request], Awaitable[None]]:
    """Dependency factory enforcing `rule` per client IP for `action`."""

    async def enforce(request: Request) -> None:
        key = f"{action}_{client_ip(request)}"
        if not get_rate_limiter(request).allow(key, rule):
            logger.warning("Rate limit exceeded for %s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=detail,
            )

    return enforce
