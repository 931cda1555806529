"""
Challenge model — one Java coding exercise.

The primary key is the client-chosen string id (e.g. "two-sum"), so saving
a challenge with an existing id updates it in place.

test_cases is a JSON list of {"input": ..., "expectedOutput": ...} objects,
stored as-is and returned verbatim.
"""

import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import Mapped, mapped_column

from javarank.core.database import Base

DIFFICULTIES = ("Easy", "Medium", "Hard")


class Challenge(Base):
    """A practice problem with optional starter code and test cases."""

    __tablename__ = "challenges"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    problem: Mapped[str] = mapped_column(Text, nullable=False)
    concept: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(10), nullable=False)
    sample_code: Mapped[str | None] = mapped_column(Text, nullable=True)
    test_cases: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "difficulty IN ('Easy', 'Medium', 'Hard')",
            name="ck_challenges_difficulty_valid",
        ),
        Index("ix_challenges_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Challenge id={self.id!r} difficulty={self.difficulty}>"
