"""
User model — a registered learner.

Security notes:
  • Only the bcrypt hash of the password is stored, never the password.
  • username and email are unique; email is optional. Uniqueness is also
    checked inside the registration transaction so duplicates get a clean
    409 instead of an integrity error.
  • profile_photo holds a data URL supplied by the client (≤ 1 MB of text).
"""

import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from javarank.core.database import Base


class User(Base):
    """One account on the practice site."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(191),
        nullable=True,
        unique=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_photo: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
