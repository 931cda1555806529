"""
Challenges router — CRUD for practice problems.

Endpoints:
  GET    /api/challenges              — all challenges, newest first
  POST   /api/challenges              — create or update by id (CSRF, 50/min)
  DELETE /api/challenges/{id}         — delete one (CSRF)
  POST   /api/challenges/bulk-delete  — delete many (CSRF)

Sanitisation on write:
  • identifiers (id, category, difficulty) → sanitize_input
  • rendered text (title, problem, concept) → sanitize_html
  • sample code is kept verbatim apart from trimming to 5000 chars
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.auth.dependencies import require_csrf_token
from javarank.auth.rate_limit import rate_limit
from javarank.core.database import STORE_ERRORS, get_db_session
from javarank.core.errors import store_error
from javarank.models.challenge import Challenge
from javarank.schemas.challenge import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ChallengeIn,
    ChallengeList,
    ChallengeOut,
    ChallengeSaved,
    SuccessResponse,
)
from javarank.services.rate_limiter import CHALLENGE_WRITE_LIMIT
from javarank.services.sanitizer import sanitize_html, sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Challenges"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]

MAX_SAMPLE_CODE_LENGTH = 5000


def _sanitized_fields(payload: ChallengeIn) -> dict:
    """Column values for a challenge, cleaned for storage."""
    sample_code = payload.sample_code.strip()[:MAX_SAMPLE_CODE_LENGTH] if payload.sample_code else None
    test_cases = (
        [tc.model_dump(by_alias=True) for tc in payload.test_cases]
        if payload.test_cases
        else None
    )
    return {
        "title": sanitize_html(payload.title),
        "problem": sanitize_html(payload.problem),
        "concept": sanitize_html(payload.concept),
        "category": sanitize_input(payload.category),
        "difficulty": sanitize_input(payload.difficulty),
        "sample_code": sample_code,
        "test_cases": test_cases,
    }


# ── 1. List ─────────────────────────────────────────────────
@router.get(
    "",
    response_model=ChallengeList,
    summary="List all challenges",
)
async def list_challenges(session: DbSession) -> ChallengeList:
    stmt = select(Challenge).order_by(Challenge.created_at.desc(), Challenge.id)
    try:
        result = await session.execute(stmt)
        rows = result.scalars().all()
    except STORE_ERRORS as exc:
        logger.exception("Failed to fetch challenges")
        raise store_error(exc, "Failed to fetch challenges") from exc

    return ChallengeList(
        challenges=[ChallengeOut.model_validate(row, from_attributes=True) for row in rows],
    )


# ── 2. Create / update ──────────────────────────────────────
@router.post(
    "",
    response_model=ChallengeSaved,
    summary="Create or update a challenge",
    dependencies=[
        Depends(require_csrf_token),
        Depends(rate_limit("challenge", CHALLENGE_WRITE_LIMIT)),
    ],
)
async def save_challenge(payload: ChallengeIn, session: DbSession) -> ChallengeSaved:
    """Upsert keyed by the sanitised id."""
    challenge_id = sanitize_input(payload.id)
    if not challenge_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid challenge id")

    fields = _sanitized_fields(payload)

    try:
        challenge = await session.get(Challenge, challenge_id)
        if challenge is None:
            challenge = Challenge(id=challenge_id, **fields)
            session.add(challenge)
        else:
            for name, value in fields.items():
                setattr(challenge, name, value)
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to save challenge %r", challenge_id)
        raise store_error(exc, "Failed to save challenge") from exc

    return ChallengeSaved(challenge=ChallengeOut(id=challenge_id, **fields))


# ── 3. Bulk delete ──────────────────────────────────────────
# Declared before /{challenge_id} so the literal path wins.
@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete several challenges",
    dependencies=[Depends(require_csrf_token)],
)
async def bulk_delete_challenges(
    payload: BulkDeleteRequest, session: DbSession,
) -> BulkDeleteResponse:
    ids = [cid for cid in (sanitize_input(i) for i in payload.ids) if cid]
    if not ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid ids array")

    try:
        result = await session.execute(delete(Challenge).where(Challenge.id.in_(ids)))
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to bulk delete %d challenges", len(ids))
        raise store_error(exc, "Failed to bulk delete challenges") from exc

    logger.info("Bulk deleted %d challenges", result.rowcount)
    return BulkDeleteResponse(deleted_count=result.rowcount)


# ── 4. Delete one ───────────────────────────────────────────
@router.delete(
    "/{challenge_id}",
    response_model=SuccessResponse,
    summary="Delete a challenge",
    dependencies=[Depends(require_csrf_token)],
)
async def delete_challenge(challenge_id: str, session: DbSession) -> SuccessResponse:
    cid = sanitize_input(challenge_id)
    try:
        await session.execute(delete(Challenge).where(Challenge.id == cid))
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Failed to delete challenge %r", cid)
        raise store_error(exc, "Failed to delete challenge") from exc

    return SuccessResponse()
