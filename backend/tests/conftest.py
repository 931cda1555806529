# tests/conftest.py
"""
Shared fixtures.

Every test gets its own SQLite file (tables created up front), its own
app instance from create_app(), and therefore its own rate limiter and
CSRF token store.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Callable, Iterator
from pathlib import Path

import pytest

# Configure before any javarank import builds the settings singleton
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BREAK_GLASS_ENABLED"] = "false"

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from javarank.core.database import Base, get_db_session
from javarank.main import create_app
from javarank.models import blog, challenge, submission, user  # noqa: F401  (register tables)


def session_override(url: str) -> Callable[[], AsyncGenerator[AsyncSession, None]]:
    """A get_db_session replacement bound to `url`."""
    engine = create_async_engine(url, poolclass=NullPool)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)

    async def _get_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    return _get_session


@pytest.fixture()
def db_url(tmp_path: Path) -> str:
    path = tmp_path / "javarank_test.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(bind=sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture()
def app(db_url: str) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_db_session] = session_override(db_url)
    return application


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def csrf_headers(client: TestClient) -> dict[str, str]:
    """Headers carrying a freshly issued CSRF token."""
    token = client.get("/api/csrf-token").json()["csrfToken"]
    return {"X-CSRF-Token": token}


@pytest.fixture()
def unreachable_app(tmp_path: Path) -> FastAPI:
    """An app whose database cannot be opened."""
    missing = tmp_path / "no-such-dir" / "javarank.db"
    application = create_app()
    application.dependency_overrides[get_db_session] = session_override(
        f"sqlite+aiosqlite:///{missing}"
    )
    return application
