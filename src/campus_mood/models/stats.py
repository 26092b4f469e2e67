# src/campus_mood/models/stats.py
"""Per-day rollups: campus mood statistics and backing-store usage."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_mood.db.session import Base


class DailyStats(Base):
    """Mood distribution for one calendar day, updated as posts arrive.

    Rows are never deleted, so statistics outlive the posts they summarize.
    """

    __tablename__ = "daily_stats"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)
    total_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mood_breakdown: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)
    active_users: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    challenge_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_mood: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class UsageStats(Base):
    """Read/write operation counts for one calendar day.

    A new day gets a new row; earlier rows are left as they were.
    """

    __tablename__ = "usage_stats"

    date: Mapped[str] = mapped_column(String(10), primary_key=True)
    daily_reads: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_writes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    warning_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=0.8)
    critical_threshold: Mapped[float] = mapped_column(Float, nullable=False, default=0.95)
