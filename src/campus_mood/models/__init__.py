# src/campus_mood/models/__init__.py
"""SQLAlchemy models for the Campus Mood application."""

from .post import Post
from .stats import DailyStats, UsageStats
from .user import User

__all__ = [
    "DailyStats",
    "Post",
    "UsageStats",
    "User",
]
