"""
Code execution router — runs Java submissions on Judge0.

POST /api/execute
  1. Per-IP rate limit (10/min).
  2. Validates the payload.
  3. Sends the code to Judge0 and waits for the verdict.
  4. If username + challengeId are present, records a Submission.
     Analytics failures are logged and never fail the request.
"""

import logging
import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.auth.rate_limit import rate_limit
from javarank.core.database import STORE_ERRORS, get_db_session
from javarank.schemas.execute import ExecuteRequest, ExecuteResponse
from javarank.services import judge0_client
from javarank.services.rate_limiter import EXECUTE_LIMIT
from javarank.services.submissions import record_submission

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Execute"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def _execution_time_ms(time_field: str | None) -> int | None:
    """Judge0 reports seconds as a string, e.g. "0.042"."""
    if not time_field:
        return None
    try:
        return math.ceil(float(time_field) * 1000)
    except ValueError:
        return None


@router.post(
    "",
    response_model=ExecuteResponse,
    summary="Compile and run Java code",
    dependencies=[Depends(rate_limit("execute", EXECUTE_LIMIT))],
)
async def execute_code(payload: ExecuteRequest, session: DbSession) -> ExecuteResponse:
    # ── 1. Judge0 ───────────────────────────────────────────
    try:
        result = await judge0_client.run_java(payload.code, payload.stdin)
    except judge0_client.Judge0ConfigError:
        logger.exception("Judge0 misconfigured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Invalid Judge0 URL configuration",
        )
    except judge0_client.Judge0Error:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Code execution service is temporarily unavailable.",
        )

    try:
        response = ExecuteResponse.model_validate(result)
    except ValidationError:
        logger.error("Unexpected Judge0 response shape: %s", list(result))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Code execution service is temporarily unavailable.",
        )

    # ── 2. Analytics (best effort) ──────────────────────────
    if payload.username and payload.challenge_id:
        try:
            await record_submission(
                session,
                username=payload.username,
                challenge_id=payload.challenge_id,
                status=judge0_client.submission_status(response.status.id),
                code=payload.code,
                execution_time_ms=_execution_time_ms(response.time),
            )
        except STORE_ERRORS:
            await session.rollback()
            logger.exception("Failed to record execution for %r", payload.username)

    return response
