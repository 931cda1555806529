"""
Async database engine, session factory, and ORM base.

Rules enforced:
  • Every DB call goes through AsyncSession (no sync, no raw SQL).
  • Sessions are request-scoped via FastAPI's Depends(get_db_session).
  • The declarative Base is shared across all models so Alembic can
    auto-detect schema changes from a single metadata object.
  • The pool is bounded: exhaustion surfaces as sqlalchemy.exc.TimeoutError
    and is turned into a 503 by the app, never retried here.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from javarank.core.config import settings

# Failures meaning "the store is unreachable or broken", as opposed to
# "no such row". Driver-level socket errors can escape unwrapped.
STORE_ERRORS = (SQLAlchemyError, OSError)


def _engine_options(url: str) -> dict[str, Any]:
    """Pool and driver options for the configured backend."""
    options: dict[str, Any] = {"echo": settings.DEBUG}

    # SQLite (tests, local dev) uses its own pool classes
    if url.startswith("sqlite"):
        return options

    options.update(
        pool_pre_ping=True,  # drop stale connections before reuse
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=settings.DB_CONNECT_TIMEOUT,
        pool_recycle=settings.DB_IDLE_TIMEOUT,
    )
    if url.startswith("postgresql+asyncpg"):
        options["connect_args"] = {"timeout": settings.DB_CONNECT_TIMEOUT}
    return options


# ── Engine ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    **_engine_options(settings.database_url),
)

# ── Session factory ─────────────────────────────────────────
async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # avoid lazy-load issues after commit
)


# ── ORM Base ────────────────────────────────────────────────
class Base(DeclarativeBase):
    """Shared declarative base for all SQLAlchemy models."""


# ── Dependency ──────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a scoped async session for one request.

    The session is committed by the caller (router/service);
    this generator only guarantees cleanup on exit.
    """
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
