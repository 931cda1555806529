"""
Submission model for per-user practice analytics.

Each row is one graded attempt at a challenge. Only the code length is
kept, never the code itself.
"""

import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from javarank.core.database import Base

MODES = ("PRACTICE", "CHALLENGE")
STATUSES = ("PASSED", "FAILED", "ERROR", "TIMEOUT")


class Submission(Base):
    """One attempt at a challenge by one user."""

    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    challenge_id: Mapped[str] = mapped_column(String(100), nullable=False)
    mode: Mapped[str] = mapped_column(String(10), nullable=False, default="PRACTICE")
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    code_length: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    execution_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    test_cases_passed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    test_cases_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("mode IN ('PRACTICE', 'CHALLENGE')", name="ck_submissions_mode_valid"),
        CheckConstraint(
            "status IN ('PASSED', 'FAILED', 'ERROR', 'TIMEOUT')",
            name="ck_submissions_status_valid",
        ),
        CheckConstraint("code_length >= 0", name="ck_submissions_code_length_non_neg"),
        Index("ix_submissions_username", "username"),
        Index("ix_submissions_username_mode", "username", "mode"),
    )

    def __repr__(self) -> str:
        return (
            f"<Submission id={self.id} user={self.username!r} "
            f"challenge={self.challenge_id!r} status={self.status}>"
        )
