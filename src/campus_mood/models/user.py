# src/campus_mood/models/user.py
"""SQLAlchemy model for signed-in campus users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_mood.db.session import Base


class User(Base):
    """Identity-provider account plus the counters behind the daily post limit.

    ``daily_post_count`` is only meaningful together with ``last_post_date``;
    read it through ``QuotaGate.posts_today`` rather than directly.
    """

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    # Null for records created lazily by the quota gate before sign-in.
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False, default="Anonymous Student")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_active: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_post_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # YYYY-MM-DD of the day daily_post_count belongs to.
    last_post_date: Mapped[str] = mapped_column(String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
