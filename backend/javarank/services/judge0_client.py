"""
Judge0 client for compiling and running Java submissions.

Uses Judge0's /submissions API via httpx with wait=true, so one POST
returns the finished result. Source, stdin and outputs travel base64
encoded to survive arbitrary bytes.

Configuration:
  JUDGE0_API_URL       — public CE instance by default
  JUDGE0_RAPIDAPI_KEY  — switches to the RapidAPI-hosted endpoint
  JUDGE0_RAPIDAPI_HOST — RapidAPI host name
  JUDGE0_TOKEN         — X-Auth-Token for self-hosted instances

Safety:
  • The base URL must pass validate_url (https + Judge0 allow-list),
    so a bad config can't turn this into an SSRF primitive.
  • Bounded timeout (30 s).
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

import httpx

from javarank.core.config import settings
from javarank.services.sanitizer import validate_url

logger = logging.getLogger(__name__)

JAVA_LANGUAGE_ID = 62  # Java (OpenJDK 17)

# Judge0 status ids
STATUS_ACCEPTED = 3
STATUS_WRONG_ANSWER = 4
STATUS_TIME_LIMIT = 5

_DECODED_FIELDS = ("stdout", "stderr", "compile_output")


class Judge0ConfigError(RuntimeError):
    """The configured Judge0 URL is not allowed."""


class Judge0Error(RuntimeError):
    """Judge0 was unreachable or returned an unusable response."""


def judge0_base_url() -> str:
    if settings.JUDGE0_RAPIDAPI_KEY:
        return f"https://{settings.JUDGE0_RAPIDAPI_HOST}"
    return settings.JUDGE0_API_URL.rstrip("/")


def _headers() -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if settings.JUDGE0_RAPIDAPI_KEY:
        headers["X-RapidAPI-Key"] = settings.JUDGE0_RAPIDAPI_KEY
        headers["X-RapidAPI-Host"] = settings.JUDGE0_RAPIDAPI_HOST
    if settings.JUDGE0_TOKEN:
        headers["X-Auth-Token"] = settings.JUDGE0_TOKEN
    return headers


def _b64encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def _b64decode(value: str | None) -> str | None:
    if not value:
        return value
    try:
        return base64.b64decode(value).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        logger.warning("Judge0 returned a field that is not valid base64")
        return value


def submission_status(status_id: int | None) -> str:
    """Map a Judge0 status id onto a Submission status."""
    if status_id == STATUS_ACCEPTED:
        return "PASSED"
    if status_id == STATUS_WRONG_ANSWER:
        return "ERROR"
    if status_id == STATUS_TIME_LIMIT:
        return "TIMEOUT"
    return "FAILED"


async def run_java(code: str, stdin: str = "") -> dict[str, Any]:
    """
    Compile and run `code` on Judge0.

    Returns:
        Judge0's result dict with stdout / stderr / compile_output decoded.

    Raises:
        Judge0ConfigError: If the configured URL fails validation.
        Judge0Error:       If the call fails or the body is not JSON.
    """
    base_url = judge0_base_url()
    if not validate_url(base_url):
        raise Judge0ConfigError(f"Judge0 URL not allowed: {base_url}")

    payload = {
        "source_code": _b64encode(code),
        "language_id": JAVA_LANGUAGE_ID,
        "stdin": _b64encode(stdin),
    }

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                f"{base_url}/submissions",
                params={"base64_encoded": "true", "wait": "true"},
                json=payload,
                headers=_headers(),
            )
    except httpx.HTTPError as exc:
        logger.error("Judge0 request failed: %s", exc)
        raise Judge0Error("Judge0 unreachable") from exc

    if response.status_code not in (200, 201):
        logger.error(
            "Judge0 API error: status=%d body=%s",
            response.status_code,
            response.text[:500],
        )
        raise Judge0Error("Judge0 returned an error")

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("Failed to parse Judge0 response: %s", exc)
        raise Judge0Error("Could not parse Judge0 response") from exc

    for field in _DECODED_FIELDS:
        data[field] = _b64decode(data.get(field))
    return data
