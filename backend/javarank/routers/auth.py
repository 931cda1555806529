"""
Auth router — registration, login and profile photos.

POST /api/auth/register
  1. Per-IP rate limit (5 per 5 minutes).
  2. Validates the payload (Pydantic → 400).
  3. Sanitises username / email.
  4. In ONE transaction: uniqueness check on username OR email → 409,
     else insert the bcrypt-hashed user and commit.
  5. Any store failure: rollback, 503.

POST /api/auth/login
  1. Per-IP rate limit (10 per 5 minutes).
  2. Validates the payload (→ 400).
  3. Looks up hash + profile photo by sanitised username.
  4. Generic 401 for unknown user AND wrong password — same body, and a
     bcrypt check runs in both cases so timing matches too.
  5. Store unreachable: break-glass credential check → 200 or 503.

POST /api/auth/profile-photo
  CSRF protected. Replaces the stored photo for a user.
"""

import functools
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from javarank.auth.dependencies import require_csrf_token
from javarank.auth.hashing import (
    hash_password,
    hash_password_sync,
    verify_break_glass,
    verify_password,
)
from javarank.auth.rate_limit import rate_limit
from javarank.core.database import STORE_ERRORS, get_db_session
from javarank.core.errors import store_unavailable
from javarank.models.user import User
from javarank.schemas.auth import (
    LoginRequest,
    LoginResponse,
    OkResponse,
    ProfilePhotoRequest,
    RegisteredUserOut,
    RegisterRequest,
    RegisterResponse,
    UserOut,
)
from javarank.services.rate_limiter import LOGIN_LIMIT, REGISTER_LIMIT
from javarank.services.sanitizer import sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

DbSession = Annotated[AsyncSession, Depends(get_db_session)]

# Generic 401, same message whether the user is missing or the password is wrong
_INVALID_CREDENTIALS = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid credentials",
)

_CONFLICT = HTTPException(
    status_code=status.HTTP_409_CONFLICT,
    detail="Username or email already exists",
)


@functools.lru_cache(maxsize=1)
def _dummy_hash() -> str:
    """Hash checked against when the username is unknown, to equalise timing."""
    return hash_password_sync("javarank-timing-equaliser")


# ── Register ────────────────────────────────────────────────
@router.post(
    "/register",
    response_model=RegisterResponse,
    summary="Create an account",
    dependencies=[
        Depends(rate_limit("register", REGISTER_LIMIT, "Too many registration attempts")),
    ],
)
async def register(payload: RegisterRequest, session: DbSession) -> RegisterResponse:
    """
    Register a new user.

    The response carries only the sanitised username — never the
    password or its hash.
    """
    username = sanitize_input(payload.username)
    email = sanitize_input(payload.email) or None

    duplicate = User.username == username
    if email is not None:
        duplicate = or_(duplicate, and_(User.email.is_not(None), User.email == email))

    try:
        # ── 1. Uniqueness check (same transaction as the insert) ─
        result = await session.execute(select(User.id).where(duplicate).limit(1))
        if result.first() is not None:
            await session.rollback()
            raise _CONFLICT

        # ── 2. Insert ───────────────────────────────────────
        password_hash = await hash_password(payload.password)
        session.add(User(username=username, email=email, password_hash=password_hash))
        await session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name
        await session.rollback()
        raise _CONFLICT
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Registration failed for %r", username)
        raise store_unavailable(exc) from exc

    logger.info("Registered user %r", username)
    return RegisterResponse(user=RegisteredUserOut(username=username))


# ── Login ───────────────────────────────────────────────────
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in with username and password",
    dependencies=[
        Depends(rate_limit("login", LOGIN_LIMIT, "Too many login attempts")),
    ],
)
async def login(payload: LoginRequest, session: DbSession) -> LoginResponse:
    username = sanitize_input(payload.username)

    try:
        result = await session.execute(
            select(User.password_hash, User.profile_photo).where(User.username == username)
        )
        row = result.first()
    except STORE_ERRORS as exc:
        logger.error("Login lookup failed, database unavailable: %s", exc)
        if verify_break_glass(username, payload.password):
            return LoginResponse(user=UserOut(username=username, profile_photo=None))
        raise store_unavailable(exc) from exc

    if row is None:
        await verify_password(payload.password, await run_in_threadpool(_dummy_hash))
        raise _INVALID_CREDENTIALS

    if not await verify_password(payload.password, row.password_hash):
        raise _INVALID_CREDENTIALS

    return LoginResponse(user=UserOut(username=username, profile_photo=row.profile_photo))


# ── Profile photo ───────────────────────────────────────────
@router.post(
    "/profile-photo",
    response_model=OkResponse,
    summary="Replace a user's profile photo",
    dependencies=[Depends(require_csrf_token)],
)
async def update_profile_photo(payload: ProfilePhotoRequest, session: DbSession) -> OkResponse:
    username = sanitize_input(payload.username)

    try:
        result = await session.execute(
            update(User).where(User.username == username).values(profile_photo=payload.photo)
        )
        if result.rowcount == 0:
            await session.rollback()
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        await session.commit()
    except STORE_ERRORS as exc:
        await session.rollback()
        logger.exception("Profile photo update failed for %r", username)
        raise store_unavailable(exc) from exc

    return OkResponse()
