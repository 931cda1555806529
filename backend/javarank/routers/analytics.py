"""
Analytics router — per-user practice statistics.

Endpoints:
  POST /api/analytics/track    — record one graded attempt (CSRF)
  POST /api/analytics/summary  — stats for PRACTICE, CHALLENGE and combined
  POST /api/analytics/reset    — wipe a user's history
  POST /api/analytics/data     — dashboard overview (alias: /advanced)

Summary, reset and the overview are POST because the username travels in the body,
matching the web client.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.auth.dependencies import require_csrf_token
from javarank.auth.rate_limit import rate_limit
from javarank.core.database import STORE_ERRORS, get_db_session
from javarank.core.errors import store_unavailable
from javarank.schemas.analytics import (
    AnalyticsOverview,
    AnalyticsSummary,
    ResetResponse,
    TrackResponse,
    TrackSubmissionRequest,
    UsernameRequest,
)
from javarank.services.rate_limiter import ANALYTICS_RESET_LIMIT, ANALYTICS_SUMMARY_LIMIT
from javarank.services.sanitizer import sanitize_input
from javarank.services.submissions import (
    MODE_CHALLENGE,
    MODE_PRACTICE,
    delete_submissions,
    mode_stats,
    practice_overview,
    record_submission,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Analytics"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


# ── 1. Track ────────────────────────────────────────────────
@router.post(
    "/track",
    response_model=TrackResponse,
    summary="Record a graded attempt",
    dependencies=[Depends(require_csrf_token)],
)
async def track_submission(payload: TrackSubmissionRequest, session: DbSession) -> TrackResponse:
    try:
        await record_submission(
            session,
            username=payload.username,
            challenge_id=payload.challenge_id,
            status=payload.status,
            code=payload.code,
            mode=payload.mode,
            execution_time_ms=payload.execution_time,
            test_cases_passed=payload.test_cases_passed,
            test_cases_total=payload.test_cases_total,
        )
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to record submission")
        raise store_unavailable(exc) from exc

    return TrackResponse()


# ── 2. Summary ──────────────────────────────────────────────
@router.post(
    "/summary",
    response_model=AnalyticsSummary,
    summary="Practice statistics for one user",
    dependencies=[Depends(rate_limit("analytics", ANALYTICS_SUMMARY_LIMIT))],
)
async def analytics_summary(payload: UsernameRequest, session: DbSession) -> AnalyticsSummary:
    username = sanitize_input(payload.username)
    try:
        practice = await mode_stats(session, username, MODE_PRACTICE)
        challenge = await mode_stats(session, username, MODE_CHALLENGE)
        combined = await mode_stats(session, username)
    except STORE_ERRORS as exc:
        logger.exception("Failed to aggregate analytics for %r", username)
        raise store_unavailable(exc) from exc

    return AnalyticsSummary(practice=practice, challenge=challenge, combined=combined)


# ── 3. Reset ────────────────────────────────────────────────
@router.post(
    "/reset",
    response_model=ResetResponse,
    summary="Delete a user's analytics history",
    dependencies=[
        Depends(rate_limit("reset", ANALYTICS_RESET_LIMIT, "Too many reset requests")),
    ],
)
async def reset_analytics(payload: UsernameRequest, session: DbSession) -> ResetResponse:
    username = sanitize_input(payload.username)
    try:
        deleted = await delete_submissions(session, username)
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to reset analytics for %r", username)
        raise store_unavailable(exc) from exc

    return ResetResponse(deleted=deleted)


# ── 4. Dashboard overview ───────────────────────────────────
@router.post(
    "/data",
    response_model=AnalyticsOverview,
    summary="Dashboard overview for one user",
    dependencies=[Depends(rate_limit("analytics", ANALYTICS_SUMMARY_LIMIT))],
)
@router.post(
    "/advanced",
    response_model=AnalyticsOverview,
    summary="Dashboard overview for one user (advanced page)",
    dependencies=[Depends(rate_limit("analytics", ANALYTICS_SUMMARY_LIMIT))],
)
async def analytics_overview(payload: UsernameRequest, session: DbSession) -> AnalyticsOverview:
    username = sanitize_input(payload.username)
    try:
        return await practice_overview(session, username)
    except STORE_ERRORS as exc:
        logger.exception("Failed to build analytics overview for %r", username)
        raise store_unavailable(exc) from exc
