"""
Pydantic v2 schemas for submission analytics.

ModeStats rows come straight from SQL aggregates (from_attributes=True),
so Core select() rows map without manual conversion.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class TrackSubmissionRequest(BaseModel):
    """Payload accepted by POST /api/analytics/track."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(..., min_length=1, max_length=64)
    challenge_id: str = Field(..., min_length=1, max_length=100, validation_alias="challengeId")
    mode: Literal["PRACTICE", "CHALLENGE"] = "PRACTICE"
    code: str = Field(..., min_length=1)
    status: Literal["PASSED", "FAILED", "ERROR", "TIMEOUT"]
    execution_time: float | None = Field(default=None, ge=0, validation_alias="executionTime")
    test_cases_passed: int = Field(default=0, ge=0, validation_alias="testCasesPassed")
    test_cases_total: int = Field(default=0, ge=0, validation_alias="testCasesTotal")


class UsernameRequest(BaseModel):
    """Payload for summary and reset."""

    username: str = Field(..., min_length=1, max_length=64)


class ModeStats(BaseModel):
    """Aggregate statistics for one practice mode (or all combined)."""

    model_config = ConfigDict(from_attributes=True)

    total_attempts: int = 0
    unique_challenges: int = 0
    passed_count: int = 0
    success_rate: int = 0
    avg_execution_time_ms: float | None = None


class AnalyticsSummary(BaseModel):
    ok: bool = True
    practice: ModeStats
    challenge: ModeStats
    combined: ModeStats


class TrackResponse(BaseModel):
    ok: bool = True


class ResetResponse(BaseModel):
    ok: bool = True
    deleted: int


# ── Dashboard overview (/data, /advanced) ───────────────────
# Field names follow what the dashboard pages read.
class PerformanceStats(BaseModel):
    """All-time totals plus the last seven days."""

    total_sessions: int = 0
    unique_challenges: int = 0
    active_days: int = 0
    solved_count: int = 0
    avg_solve_time: float | None = None
    min_solve_time: int | None = None
    max_solve_time: int | None = None
    recent_attempts: int = 0
    recent_passed: int = 0
    recent_success_rate: int = 0


class WeeklyProgress(BaseModel):
    year_week: int
    attempts: int
    unique_challenges: int
    solved: int
    avg_time: float | None = None
    week_improvement: int | None = None


class HourlyActivity(BaseModel):
    hour: int
    activity_count: int
    success_count: int
    avg_solve_time: float | None = None


class ChallengeStats(BaseModel):
    challenge_id: str
    total_attempts: int
    passed_attempts: int
    success_rate: int
    avg_solve_time: float | None = None
    total_test_cases_passed: int = 0
    total_test_cases_available: int = 0
    last_attempted: datetime.datetime | None = None


class AnalyticsOverview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    performance: PerformanceStats
    weekly_progress: list[WeeklyProgress] = Field(default_factory=list, alias="weeklyProgress")
    hourly_pattern: list[HourlyActivity] = Field(default_factory=list, alias="hourlyPattern")
    challenge_stats: list[ChallengeStats] = Field(default_factory=list, alias="challengeStats")
