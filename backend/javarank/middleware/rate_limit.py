"""Global per-IP rate limiting middleware (1000 requests/minute)."""

import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from javarank.auth.dependencies import client_ip, get_rate_limiter
from javarank.services.rate_limiter import GLOBAL_LIMIT

logger = logging.getLogger(__name__)


class GlobalRateLimitMiddleware(BaseHTTPMiddleware):
    """Reject a client with 429 once it exceeds the global request budget."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        key = f"global_{client_ip(request)}"
        if not get_rate_limiter(request).allow(key, GLOBAL_LIMIT):
            logger.warning("Global rate limit exceeded for %s", key)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests"},
            )
        return await call_next(request)
