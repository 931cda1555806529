"""Tests for submission tracking, the per-mode summary and the dashboard overview."""

import datetime

import pytest
from sqlalchemy import create_engine, insert

from javarank.models.submission import Submission


def track(client, headers, **overrides):
    payload = {
        "username": "alice",
        "challengeId": "two-sum",
        "mode": "PRACTICE",
        "code": "class Main {}",
        "status": "PASSED",
        **overrides,
    }
    return client.post("/api/analytics/track", json=payload, headers=headers)


def summary(client, username="alice"):
    return client.post("/api/analytics/summary", json={"username": username})


@pytest.fixture
def history(client, csrf_headers):
    """Three practice attempts and one challenge attempt for alice."""
    track(client, csrf_headers, executionTime=100, testCasesPassed=2, testCasesTotal=2)
    track(client, csrf_headers, status="FAILED", executionTime=200)
    track(client, csrf_headers, challengeId="fizz-buzz")
    track(client, csrf_headers, challengeId="fizz-buzz", mode="CHALLENGE", executionTime=50)
    track(client, csrf_headers, username="bob", status="ERROR")


class TestTrack:
    """Tests for POST /api/analytics/track."""

    def test_track_ok(self, client, csrf_headers):
        response = track(client, csrf_headers)
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_requires_csrf(self, client):
        assert track(client, {}).status_code == 403

    @pytest.mark.parametrize(
        "overrides",
        [{"status": "MAYBE"}, {"mode": "EXAM"}, {"executionTime": -1}, {"code": ""}],
    )
    def test_invalid_payload(self, client, csrf_headers, overrides):
        assert track(client, csrf_headers, **overrides).status_code == 400


class TestSummary:
    """Tests for POST /api/analytics/summary."""

    def test_aggregates_per_mode(self, client, history):
        response = summary(client)
        assert response.status_code == 200
        body = response.json()

        assert body["ok"] is True
        assert body["practice"] == {
            "total_attempts": 3,
            "unique_challenges": 2,
            "passed_count": 2,
            "success_rate": 67,
            "avg_execution_time_ms": 150.0,
        }
        assert body["challenge"] == {
            "total_attempts": 1,
            "unique_challenges": 1,
            "passed_count": 1,
            "success_rate": 100,
            "avg_execution_time_ms": 50.0,
        }
        combined = body["combined"]
        assert combined["total_attempts"] == 4
        assert combined["unique_challenges"] == 2
        assert combined["passed_count"] == 3
        assert combined["success_rate"] == 75
        assert combined["avg_execution_time_ms"] == pytest.approx(350 / 3)

    def test_unknown_user_is_all_zero(self, client):
        body = summary(client, "nobody").json()
        for mode in ("practice", "challenge", "combined"):
            assert body[mode] == {
                "total_attempts": 0,
                "unique_challenges": 0,
                "passed_count": 0,
                "success_rate": 0,
                "avg_execution_time_ms": None,
            }

    def test_rate_limit(self, client):
        for _ in range(20):
            assert summary(client).status_code == 200
        assert summary(client).status_code == 429


class TestReset:
    """Tests for POST /api/analytics/reset."""

    def test_reset_deletes_only_that_user(self, client, history):
        response = client.post("/api/analytics/reset", json={"username": "alice"})
        assert response.status_code == 200
        assert response.json() == {"ok": True, "deleted": 4}

        assert summary(client).json()["combined"]["total_attempts"] == 0
        assert summary(client, "bob").json()["combined"]["total_attempts"] == 1

    def test_rate_limit(self, client):
        for _ in range(3):
            client.post("/api/analytics/reset", json={"username": "alice"})

        response = client.post("/api/analytics/reset", json={"username": "alice"})
        assert response.status_code == 429
        assert response.json() == {"error": "Too many reset requests"}


def insert_submission(db_url, days_ago, **values):
    """Write a submission with a back-dated created_at."""
    row = {
        "username": "alice",
        "challenge_id": "two-sum",
        "mode": "PRACTICE",
        "status": "PASSED",
        "code_length": 10,
        "created_at": datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(days=days_ago),
        **values,
    }
    engine = create_engine(db_url.replace("+aiosqlite", ""))
    with engine.begin() as conn:
        conn.execute(insert(Submission).values(**row))
    engine.dispose()


def overview(client, path="/api/analytics/data", username="alice"):
    return client.post(path, json={"username": username})


class TestFractionalExecutionTime:
    """executionTime may carry a fraction of a millisecond."""

    def test_fraction_is_rounded_up(self, client, csrf_headers):
        response = track(client, csrf_headers, executionTime=12.5)
        assert response.status_code == 200

        stats = summary(client).json()["practice"]
        assert stats["avg_execution_time_ms"] == 13.0


class TestOverview:
    """Tests for POST /api/analytics/data and /api/analytics/advanced."""

    def test_performance_totals(self, client, history):
        response = overview(client)
        assert response.status_code == 200

        performance = response.json()["performance"]
        assert performance["total_sessions"] == 4
        assert performance["unique_challenges"] == 2
        assert performance["solved_count"] == 3
        assert performance["active_days"] == 1
        assert performance["min_solve_time"] == 50
        assert performance["max_solve_time"] == 200
        assert performance["avg_solve_time"] == pytest.approx(350 / 3)
        assert performance["recent_attempts"] == 4
        assert performance["recent_passed"] == 3
        assert performance["recent_success_rate"] == 75

    def test_advanced_alias_returns_the_same_overview(self, client, history):
        assert overview(client, "/api/analytics/advanced").json() == overview(client).json()

    def test_challenge_stats(self, client, history):
        stats = {c["challenge_id"]: c for c in overview(client).json()["challengeStats"]}

        assert set(stats) == {"two-sum", "fizz-buzz"}
        two_sum = stats["two-sum"]
        assert two_sum["total_attempts"] == 2
        assert two_sum["passed_attempts"] == 1
        assert two_sum["success_rate"] == 50
        assert two_sum["avg_solve_time"] == 150.0
        assert two_sum["total_test_cases_passed"] == 2
        assert two_sum["total_test_cases_available"] == 2
        assert two_sum["last_attempted"] is not None
        assert stats["fizz-buzz"]["success_rate"] == 100

    def test_hourly_pattern_counts_every_recent_attempt(self, client, history):
        hours = overview(client).json()["hourlyPattern"]

        assert sum(h["activity_count"] for h in hours) == 4
        assert sum(h["success_count"] for h in hours) == 3
        assert all(0 <= h["hour"] <= 23 for h in hours)

    def test_recent_window_excludes_old_attempts(self, client, csrf_headers, db_url):
        track(client, csrf_headers)
        insert_submission(db_url, days_ago=20, status="FAILED")
        insert_submission(db_url, days_ago=60, status="FAILED")

        body = overview(client).json()
        performance = body["performance"]
        assert performance["total_sessions"] == 3
        assert performance["active_days"] == 3
        assert performance["recent_attempts"] == 1
        assert performance["recent_success_rate"] == 100
        # 30-day window for the hourly histogram
        assert sum(h["activity_count"] for h in body["hourlyPattern"]) == 2

    def test_weekly_progress(self, client, csrf_headers, db_url):
        insert_submission(db_url, days_ago=14)
        insert_submission(db_url, days_ago=14, challenge_id="fizz-buzz")
        insert_submission(db_url, days_ago=200)
        track(client, csrf_headers)

        weeks = overview(client).json()["weeklyProgress"]

        assert len(weeks) == 2
        older, current = weeks
        assert older["year_week"] < current["year_week"]
        assert older["attempts"] == 2
        assert older["unique_challenges"] == 2
        assert older["solved"] == 2
        assert older["week_improvement"] is None
        assert current["solved"] == 1
        assert current["week_improvement"] == -1

    def test_unknown_user_is_empty(self, client):
        body = overview(client, username="nobody").json()

        assert body["performance"]["total_sessions"] == 0
        assert body["performance"]["avg_solve_time"] is None
        assert body["weeklyProgress"] == []
        assert body["hourlyPattern"] == []
        assert body["challengeStats"] == []

    def test_shares_the_summary_rate_limit(self, client):
        for _ in range(10):
            assert summary(client).status_code == 200
        for _ in range(10):
            assert overview(client).status_code == 200
        assert overview(client, "/api/analytics/advanced").status_code == 429
