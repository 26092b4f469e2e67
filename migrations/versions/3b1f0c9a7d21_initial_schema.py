"""initial schema

Revision ID: 3b1f0c9a7d21
Revises:
Create Date: 2026-10-12 09:14:02.518330

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3b1f0c9a7d21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create posts, users and the per-day stats tables."""
    op.create_table(
        "post",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("author_id", sa.String(length=128), nullable=False),
        sa.Column("mood", sa.String(length=32), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_challenge", sa.Boolean(), nullable=False),
        sa.Column("challenge_id", sa.String(length=16), nullable=True),
        sa.Column("reactions", sa.JSON(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_author_id", "post", ["author_id"])
    op.create_index("ix_post_created_at_id", "post", ["created_at", "id"])
    op.create_index("ix_post_expires_at", "post", ["expires_at"])

    op.create_table(
        "user_account",
        sa.Column("id", sa.String(length=128), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_active", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_posts", sa.Integer(), nullable=False),
        sa.Column("daily_post_count", sa.Integer(), nullable=False),
        sa.Column("last_post_date", sa.String(length=10), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "daily_stats",
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("total_posts", sa.Integer(), nullable=False),
        sa.Column("mood_breakdown", sa.JSON(), nullable=False),
        sa.Column("active_users", sa.Integer(), nullable=False),
        sa.Column("challenge_posts", sa.Integer(), nullable=False),
        sa.Column("top_mood", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("date"),
    )

    op.create_table(
        "usage_stats",
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("daily_reads", sa.Integer(), nullable=False),
        sa.Column("daily_writes", sa.Integer(), nullable=False),
        sa.Column("warning_threshold", sa.Float(), nullable=False),
        sa.Column("critical_threshold", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("date"),
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("usage_stats")
    op.drop_table("daily_stats")
    op.drop_table("user_account")
    op.drop_index("ix_post_expires_at", table_name="post")
    op.drop_index("ix_post_created_at_id", table_name="post")
    op.drop_index("ix_post_author_id", table_name="post")
    op.drop_table("post")
