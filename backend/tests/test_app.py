"""Tests for app-wide behaviour: system endpoints, headers, limits, errors."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from javarank.core.config import settings
from javarank.core.database import get_db_session
from javarank.middleware.security_headers import SECURITY_HEADERS
from javarank.services.rate_limiter import GLOBAL_LIMIT


class TestSystemEndpoints:
    """Tests for ping and health."""

    def test_ping(self, client):
        response = client.get("/api/ping")
        assert response.status_code == 200
        assert response.json() == {"message": settings.PING_MESSAGE}

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}


class TestSecurityHeaders:
    """Tests for SecurityHeadersMiddleware."""

    def test_headers_on_success(self, client):
        response = client.get("/api/ping")
        for name, value in SECURITY_HEADERS.items():
            assert response.headers.get(name) == value

    def test_headers_on_errors(self, client):
        """Also present on 403 and 404 responses."""
        forbidden = client.delete("/api/challenges/x")
        missing = client.get("/api/nothing-here")

        assert forbidden.status_code == 403
        assert missing.status_code == 404
        for response in (forbidden, missing):
            assert response.headers.get("X-Frame-Options") == "DENY"
            assert response.headers.get("X-Content-Type-Options") == "nosniff"


class TestGlobalRateLimit:
    """Tests for GlobalRateLimitMiddleware."""

    def test_rejects_after_budget_is_spent(self, app, client):
        limiter = app.state.rate_limiter
        # Spend all but one request of this client's budget directly
        for _ in range(GLOBAL_LIMIT.max_attempts - 1):
            limiter.allow("global_testclient", GLOBAL_LIMIT)

        assert client.get("/api/ping").status_code == 200

        response = client.get("/api/ping")
        assert response.status_code == 429
        assert response.json() == {"error": "Too many requests"}
        assert response.headers.get("X-Frame-Options") == "DENY"

    def test_separate_apps_do_not_share_counters(self, app, client):
        from javarank.main import create_app

        for _ in range(GLOBAL_LIMIT.max_attempts):
            app.state.rate_limiter.allow("global_testclient", GLOBAL_LIMIT)

        assert client.get("/api/ping").status_code == 429
        with TestClient(create_app()) as other:
            assert other.get("/api/ping").status_code == 200


class TestCors:
    """Tests for the CORS configuration."""

    def test_allowed_origin(self, client):
        origin = settings.allowed_origins[0]
        response = client.options(
            "/api/auth/login",
            headers={
                "Origin": origin,
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == origin
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_unknown_origin_is_not_echoed(self, client):
        response = client.get("/api/ping", headers={"Origin": "https://evil.example"})
        assert "access-control-allow-origin" not in response.headers


class TestErrorEnvelope:
    """Every failure leaves as {"error": ...}."""

    def test_unhandled_exception_is_generic_500(self, app):
        async def explode():
            raise RuntimeError("secret internals")

        app.add_api_route("/api/explode", explode)

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/explode")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "secret internals" not in response.text
        for name, value in SECURITY_HEADERS.items():
            assert response.headers.get(name) == value

    def test_validation_errors_are_400(self, client):
        response = client.post("/api/auth/login", content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input"}


class FailingSession:
    """Stands in for AsyncSession; every query raises `exc`."""

    def __init__(self, exc: Exception):
        self.exc = exc

    async def execute(self, *args, **kwargs):
        raise self.exc

    async def commit(self):
        raise self.exc

    async def rollback(self):
        pass


def use_failing_session(app, exc):
    def _get_session():
        return FailingSession(exc)

    app.dependency_overrides[get_db_session] = _get_session


class TestStoreFailures:
    """How data-store failures surface on the JSON routes."""

    def test_unexpected_error_in_a_route_keeps_security_headers(self, app):
        use_failing_session(app, RuntimeError("boom"))

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/api/analytics/summary", json={"username": "alice"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers.get("X-Frame-Options") == "DENY"
        assert response.headers.get("X-Content-Type-Options") == "nosniff"
        assert response.headers.get("X-XSS-Protection") == "1; mode=block"
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"

    @pytest.mark.parametrize("path", ["/api/challenges", "/api/blogs", "/api/blogs/admin/all"])
    def test_pool_exhaustion_is_503(self, app, path):
        use_failing_session(app, PoolTimeoutError("QueuePool limit reached"))

        with TestClient(app) as client:
            response = client.get(path)

        assert response.status_code == 503
        assert response.json() == {"error": "Database unavailable"}

    def test_pool_exhaustion_on_write_is_503(self, app):
        use_failing_session(app, PoolTimeoutError("QueuePool limit reached"))

        with TestClient(app) as client:
            token = client.get("/api/csrf-token").json()["csrfToken"]
            response = client.delete("/api/challenges/two-sum", headers={"X-CSRF-Token": token})

        assert response.status_code == 503

    def test_other_store_errors_keep_the_route_message(self, app):
        use_failing_session(app, OperationalError("SELECT 1", {}, Exception("disk I/O error")))

        with TestClient(app) as client:
            response = client.get("/api/challenges")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch challenges"}
