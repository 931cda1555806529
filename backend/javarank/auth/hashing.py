"""
Password hashing and the break-glass credential check.

Security notes:
  • bcrypt with a configurable cost (12 in production). A fresh random salt
    per call, so the same password never hashes to the same string.
  • bcrypt is CPU-bound; the async wrappers run it in the thread pool so a
    login never stalls the event loop.
  • Break-glass: a single operator credential accepted ONLY while the
    database is unreachable. Disabled unless BREAK_GLASS_ENABLED is set.
    Both fields are compared with hmac.compare_digest and both comparisons
    always run, so timing does not reveal which field mismatched.
    Every attempt is audit-logged.
"""

import hmac
import logging

import bcrypt
from fastapi.concurrency import run_in_threadpool

from javarank.core.config import settings

logger = logging.getLogger(__name__)


# bcrypt only reads the first 72 bytes; newer releases reject longer input
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password_sync(password: str, rounds: int | None = None) -> str:
    """bcrypt hash of `password` as a str ready for the password_hash column."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password_sync(password: str, password_hash: str) -> bool:
    """Constant-time bcrypt check. Malformed hashes never verify."""
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        logger.error("Stored password hash is not a valid bcrypt hash")
        return False


async def hash_password(password: str) -> str:
    return await run_in_threadpool(hash_password_sync, password)


async def verify_password(password: str, password_hash: str) -> bool:
    return await run_in_threadpool(verify_password_sync, password, password_hash)


def verify_break_glass(username: str, password: str) -> bool:
    """
    Check the emergency operator credential.

    Only meaningful when the database is down; callers must not consult it
    for ordinary "user not found" results.
    """
    if not settings.BREAK_GLASS_ENABLED:
        return False
    if not settings.BREAK_GLASS_USERNAME or not settings.BREAK_GLASS_PASSWORD:
        logger.error("Break-glass enabled but no credential configured")
        return False

    username_ok = hmac.compare_digest(
        username.encode("utf-8"),
        settings.BREAK_GLASS_USERNAME.encode("utf-8"),
    )
    password_ok = hmac.compare_digest(
        password.encode("utf-8"),
        settings.BREAK_GLASS_PASSWORD.encode("utf-8"),
    )
    # Non-short-circuit AND: both results are always computed above
    granted = username_ok & password_ok

    if granted:
        logger.warning("AUDIT break-glass login granted for %r (database unavailable)", username)
    else:
        logger.warning("AUDIT break-glass login refused (database unavailable)")
    return granted
