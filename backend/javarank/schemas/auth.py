"""
Pydantic v2 schemas for the auth endpoints.

Separation:
  • RegisterRequest / LoginRequest — what the CLIENT sends.
  • AuthResponse                   — what the SERVER returns.

Passwords appear only in request schemas; no response ever carries a
password or a hash.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


# ── Request schemas ─────────────────────────────────────────
class RegisterRequest(BaseModel):
    """Payload accepted by POST /api/auth/register."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=64,
        pattern=r"^[a-zA-Z0-9_\-.]+$",
        examples=["alice"],
    )
    password: str = Field(..., min_length=6, max_length=128)
    email: str | None = Field(
        default=None,
        max_length=191,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        examples=["alice@example.com"],
    )


class LoginRequest(BaseModel):
    """Payload accepted by POST /api/auth/login."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class ProfilePhotoRequest(BaseModel):
    """Payload accepted by POST /api/auth/profile-photo."""

    username: str = Field(..., min_length=1, max_length=64)
    photo: str = Field(..., max_length=1_000_000)


# ── Response schemas ────────────────────────────────────────
class UserOut(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    profile_photo: str | None = Field(default=None, alias="profilePhoto")


class RegisteredUserOut(BaseModel):
    username: str


class RegisterResponse(BaseModel):
    ok: bool = True
    user: RegisteredUserOut


class LoginResponse(BaseModel):
    ok: bool = True
    user: UserOut


class OkResponse(BaseModel):
    ok: bool = True
