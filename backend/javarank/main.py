"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity (non-fatal).
  • On shutdown: dispose the engine cleanly.

Middleware (outermost first):
  • CORS — ALLOWED_ORIGINS only, credentials allowed
  • Security headers on every response
  • Global per-IP rate limit (1000/min)

Routers:
  • /api/auth       — register, login, profile photo
  • /api/challenges — challenge CRUD
  • /api/blogs      — blog reading + admin
  • /api/analytics  — submission tracking + stats
  • /api/execute    — Judge0 code execution
  • /api/ping, /api/csrf-token, /health
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from javarank.auth.dependencies import get_csrf_store
from javarank.core.config import settings
from javarank.core.database import engine
from javarank.core.errors import register_exception_handlers
from javarank.middleware.rate_limit import GlobalRateLimitMiddleware
from javarank.middleware.security_headers import SecurityHeadersMiddleware
from javarank.routers.analytics import router as analytics_router
from javarank.routers.auth import router as auth_router
from javarank.routers.blogs import router as blogs_router
from javarank.routers.challenges import router as challenges_router
from javarank.routers.execute import router as execute_router
from javarank.services.csrf import CsrfTokenStore
from javarank.services.rate_limiter import RateLimiter

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup: verify DB is reachable
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    if settings.BREAK_GLASS_ENABLED:
        logger.warning("Break-glass login is ENABLED — only for database outages")

    yield  # ← application runs here

    # Shutdown: clean up connection pool
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── App factory ─────────────────────────────────────────────
def create_app() -> FastAPI:
    """
    Build a fully wired application.

    Each app owns a fresh RateLimiter and CsrfTokenStore on app.state,
    so separate instances (e.g. per test) never share counters or tokens.
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        description="Java coding-challenge practice API.",
        lifespan=lifespan,
    )

    app.state.rate_limiter = RateLimiter(max_keys=settings.RATE_LIMIT_MAX_KEYS)
    app.state.csrf_tokens = CsrfTokenStore(ttl_seconds=settings.CSRF_TOKEN_TTL_SECONDS)

    register_exception_handlers(app)

    # Last added runs first
    app.add_middleware(GlobalRateLimitMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount routers
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(challenges_router, prefix="/api/challenges")
    app.include_router(blogs_router, prefix="/api/blogs")
    app.include_router(analytics_router, prefix="/api/analytics")
    app.include_router(execute_router, prefix="/api/execute")

    # ── System endpoints ────────────────────────────────────
    @app.get("/api/ping", tags=["System"], summary="Ping")
    async def ping() -> dict[str, str]:
        return {"message": settings.PING_MESSAGE}

    @app.get("/api/csrf-token", tags=["System"], summary="Issue a CSRF token")
    async def csrf_token(
        store: Annotated[CsrfTokenStore, Depends(get_csrf_store)],
    ) -> dict[str, str]:
        """Token for the X-CSRF-Token header, valid for one hour."""
        return {"csrfToken": store.generate()}

    @app.get("/health", tags=["System"], summary="Liveness probe")
    async def health_check() -> dict[str, str]:
        """Shallow health check — confirms the process is alive."""
        return {"status": "healthy"}

    return app


app = create_app()
