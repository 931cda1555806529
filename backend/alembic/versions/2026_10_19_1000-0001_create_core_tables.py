"""create users, challenges, blogs and submissions tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Initial schema:
  - users:       accounts (unique username / email, bcrypt hash)
  - challenges:  practice problems keyed by string id
  - blogs:       articles with publish flag
  - submissions: graded attempts for analytics
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── 1. users ────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(191), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("profile_photo", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    # ── 2. challenges ───────────────────────────────────────
    op.create_table(
        "challenges",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("problem", sa.Text(), nullable=False),
        sa.Column("concept", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("difficulty", sa.String(10), nullable=False),
        sa.Column("sample_code", sa.Text(), nullable=True),
        sa.Column("test_cases", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "difficulty IN ('Easy', 'Medium', 'Hard')",
            name="ck_challenges_difficulty_valid",
        ),
    )
    op.create_index("ix_challenges_created_at", "challenges", ["created_at"])

    # ── 3. blogs ────────────────────────────────────────────
    op.create_table(
        "blogs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("published", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blogs_slug", "blogs", ["slug"])
    op.create_index("ix_blogs_published_created_at", "blogs", ["published", "created_at"])

    # ── 4. submissions ──────────────────────────────────────
    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("challenge_id", sa.String(100), nullable=False),
        sa.Column("mode", sa.String(10), nullable=False),
        sa.Column("status", sa.String(10), nullable=False),
        sa.Column("code_length", sa.Integer(), nullable=False),
        sa.Column("execution_time_ms", sa.Integer(), nullable=True),
        sa.Column("test_cases_passed", sa.Integer(), nullable=False),
        sa.Column("test_cases_total", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("mode IN ('PRACTICE', 'CHALLENGE')", name="ck_submissions_mode_valid"),
        sa.CheckConstraint(
            "status IN ('PASSED', 'FAILED', 'ERROR', 'TIMEOUT')",
            name="ck_submissions_status_valid",
        ),
        sa.CheckConstraint("code_length >= 0", name="ck_submissions_code_length_non_neg"),
    )
    op.create_index("ix_submissions_username", "submissions", ["username"])
    op.create_index("ix_submissions_username_mode", "submissions", ["username", "mode"])


def downgrade() -> None:
    op.drop_index("ix_submissions_username_mode", table_name="submissions")
    op.drop_index("ix_submissions_username", table_name="submissions")
    op.drop_table("submissions")
    op.drop_index("ix_blogs_published_created_at", table_name="blogs")
    op.drop_index("ix_blogs_slug", table_name="blogs")
    op.drop_table("blogs")
    op.drop_index("ix_challenges_created_at", table_name="challenges")
    op.drop_table("challenges")
    op.drop_table("users")
