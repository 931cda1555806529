"""
Submission analytics service.

Writes graded attempts and aggregates them per practice mode and for the
dashboard overview. All aggregation happens in SQL; Python only shapes
the grouped rows.
"""

from __future__ import annotations

import datetime
import logging
import math

from sqlalchemy import and_, case, delete, distinct, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.models.submission import Submission
from javarank.schemas.analytics import (
    AnalyticsOverview,
    ChallengeStats,
    HourlyActivity,
    ModeStats,
    PerformanceStats,
    WeeklyProgress,
)
from javarank.services.sanitizer import sanitize_input

logger = logging.getLogger(__name__)

MODE_PRACTICE = "PRACTICE"
MODE_CHALLENGE = "CHALLENGE"

# Overview windows
RECENT_DAYS = 7
HOURLY_DAYS = 30
WEEKLY_WEEKS = 12


def _success_rate(passed: int, total: int) -> int:
    """Whole-number percentage, 0 when there were no attempts."""
    return round(passed * 100 / total) if total else 0


def _as_float(value) -> float | None:
    return float(value) if value is not None else None


async def record_submission(
    session: AsyncSession,
    *,
    username: str,
    challenge_id: str,
    status: str,
    code: str,
    mode: str = MODE_PRACTICE,
    execution_time_ms: float | None = None,
    test_cases_passed: int = 0,
    test_cases_total: int = 0,
) -> Submission:
    """
    Persist one attempt and commit.

    Identifiers are sanitised here so every caller stores the same form.
    The code itself is never stored, only its length. Execution time is
    rounded up to whole milliseconds.
    """
    submission = Submission(
        username=sanitize_input(username),
        challenge_id=sanitize_input(challenge_id),
        mode=mode,
        status=status,
        code_length=len(code),
        execution_time_ms=math.ceil(execution_time_ms) if execution_time_ms is not None else None,
        test_cases_passed=test_cases_passed,
        test_cases_total=test_cases_total,
    )
    session.add(submission)
    await session.commit()
    return submission


async def mode_stats(
    session: AsyncSession,
    username: str,
    mode: str | None = None,
) -> ModeStats:
    """
    SQL: SELECT COUNT(*), COUNT(DISTINCT challenge_id),
                SUM(CASE WHEN status = 'PASSED' THEN 1 ELSE 0 END),
                AVG(execution_time_ms)
         FROM submissions WHERE username = ? [AND mode = ?]

    mode=None aggregates across both modes.
    """
    passed = func.sum(case((Submission.status == "PASSED", 1), else_=0))
    stmt = select(
        func.count().label("total_attempts"),
        func.count(distinct(Submission.challenge_id)).label("unique_challenges"),
        func.coalesce(passed, 0).label("passed_count"),
        func.avg(Submission.execution_time_ms).label("avg_execution_time_ms"),
    ).where(Submission.username == username)
    if mode is not None:
        stmt = stmt.where(Submission.mode == mode)

    row = (await session.execute(stmt)).one()

    total = int(row.total_attempts or 0)
    passed_count = int(row.passed_count or 0)
    return ModeStats(
        total_attempts=total,
        unique_challenges=int(row.unique_challenges or 0),
        passed_count=passed_count,
        success_rate=_success_rate(passed_count, total),
        avg_execution_time_ms=_as_float(row.avg_execution_time_ms),
    )


# ── Dashboard overview ──────────────────────────────────────
_PASSED = case((Submission.status == "PASSED", 1), else_=0)


async def _performance(
    session: AsyncSession, username: str, since: datetime.datetime,
) -> PerformanceStats:
    recent = Submission.created_at >= since
    stmt = select(
        func.count().label("total_sessions"),
        func.count(distinct(Submission.challenge_id)).label("unique_challenges"),
        func.count(distinct(func.date(Submission.created_at))).label("active_days"),
        func.coalesce(func.sum(_PASSED), 0).label("solved_count"),
        func.avg(Submission.execution_time_ms).label("avg_solve_time"),
        func.min(Submission.execution_time_ms).label("min_solve_time"),
        func.max(Submission.execution_time_ms).label("max_solve_time"),
        func.coalesce(func.sum(case((recent, 1), else_=0)), 0).label("recent_attempts"),
        func.coalesce(
            func.sum(case((and_(recent, Submission.status == "PASSED"), 1), else_=0)), 0,
        ).label("recent_passed"),
    ).where(Submission.username == username)

    row = (await session.execute(stmt)).one()
    recent_attempts = int(row.recent_attempts or 0)
    recent_passed = int(row.recent_passed or 0)
    return PerformanceStats(
        total_sessions=int(row.total_sessions or 0),
        unique_challenges=int(row.unique_challenges or 0),
        active_days=int(row.active_days or 0),
        solved_count=int(row.solved_count or 0),
        avg_solve_time=_as_float(row.avg_solve_time),
        min_solve_time=row.min_solve_time,
        max_solve_time=row.max_solve_time,
        recent_attempts=recent_attempts,
        recent_passed=recent_passed,
        recent_success_rate=_success_rate(recent_passed, recent_attempts),
    )


async def _weekly_progress(
    session: AsyncSession, username: str, since: datetime.datetime,
) -> list[WeeklyProgress]:
    year = extract("year", Submission.created_at)
    week = extract("week", Submission.created_at)
    stmt = (
        select(
            year.label("year"),
            week.label("week"),
            func.count().label("attempts"),
            func.count(distinct(Submission.challenge_id)).label("unique_challenges"),
            func.coalesce(func.sum(_PASSED), 0).label("solved"),
            func.avg(Submission.execution_time_ms).label("avg_time"),
        )
        .where(Submission.username == username, Submission.created_at >= since)
        .group_by(year, week)
        .order_by(year, week)
    )

    weeks: list[WeeklyProgress] = []
    previous: int | None = None
    for row in (await session.execute(stmt)).all():
        solved = int(row.solved or 0)
        weeks.append(WeeklyProgress(
            year_week=int(row.year) * 100 + int(row.week),
            attempts=int(row.attempts),
            unique_challenges=int(row.unique_challenges),
            solved=solved,
            avg_time=_as_float(row.avg_time),
            week_improvement=None if previous is None else solved - previous,
        ))
        previous = solved
    return weeks


async def _hourly_pattern(
    session: AsyncSession, username: str, since: datetime.datetime,
) -> list[HourlyActivity]:
    hour = extract("hour", Submission.created_at)
    stmt = (
        select(
            hour.label("hour"),
            func.count().label("activity_count"),
            func.coalesce(func.sum(_PASSED), 0).label("success_count"),
            func.avg(Submission.execution_time_ms).label("avg_solve_time"),
        )
        .where(Submission.username == username, Submission.created_at >= since)
        .group_by(hour)
        .order_by(hour)
    )
    return [
        HourlyActivity(
            hour=int(row.hour),
            activity_count=int(row.activity_count),
            success_count=int(row.success_count or 0),
            avg_solve_time=_as_float(row.avg_solve_time),
        )
        for row in (await session.execute(stmt)).all()
    ]


async def _challenge_stats(session: AsyncSession, username: str) -> list[ChallengeStats]:
    last_attempted = func.max(Submission.created_at)
    stmt = (
        select(
            Submission.challenge_id,
            func.count().label("total_attempts"),
            func.coalesce(func.sum(_PASSED), 0).label("passed_attempts"),
            func.avg(Submission.execution_time_ms).label("avg_solve_time"),
            func.coalesce(func.sum(Submission.test_cases_passed), 0).label("cases_passed"),
            func.coalesce(func.sum(Submission.test_cases_total), 0).label("cases_total"),
            last_attempted.label("last_attempted"),
        )
        .where(Submission.username == username)
        .group_by(Submission.challenge_id)
        .order_by(last_attempted.desc(), Submission.challenge_id)
    )

    stats = []
    for row in (await session.execute(stmt)).all():
        total = int(row.total_attempts)
        passed = int(row.passed_attempts or 0)
        stats.append(ChallengeStats(
            challenge_id=row.challenge_id,
            total_attempts=total,
            passed_attempts=passed,
            success_rate=_success_rate(passed, total),
            avg_solve_time=_as_float(row.avg_solve_time),
            total_test_cases_passed=int(row.cases_passed),
            total_test_cases_available=int(row.cases_total),
            last_attempted=row.last_attempted,
        ))
    return stats


async def practice_overview(
    session: AsyncSession,
    username: str,
    now: datetime.datetime | None = None,
) -> AnalyticsOverview:
    """
    Everything the analytics dashboards draw for one user.

    Four grouped queries: all-time performance (with a 7-day slice),
    12 weeks of weekly progress, a 30-day hour-of-day histogram, and
    per-challenge totals. Times are execution milliseconds.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return AnalyticsOverview(
        performance=await _performance(
            session, username, now - datetime.timedelta(days=RECENT_DAYS),
        ),
        weekly_progress=await _weekly_progress(
            session, username, now - datetime.timedelta(weeks=WEEKLY_WEEKS),
        ),
        hourly_pattern=await _hourly_pattern(
            session, username, now - datetime.timedelta(days=HOURLY_DAYS),
        ),
        challenge_stats=await _challenge_stats(session, username),
    )


async def delete_submissions(session: AsyncSession, username: str) -> int:
    """Remove every submission for a user. Returns the number deleted."""
    result = await session.execute(delete(Submission).where(Submission.username == username))
    await session.commit()
    logger.info("Deleted %d submissions for %r", result.rowcount, username)
    return result.rowcount
