"""Schemas for campus statistics and store usage."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DailyStatsResponse(BaseModel):
    date: str
    total_posts: int
    mood_breakdown: dict[str, int]
    active_users: int
    challenge_posts: int
    top_mood: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MoodCountResponse(BaseModel):
    mood: str
    count: int

    model_config = ConfigDict(from_attributes=True)


class StatsSummaryResponse(BaseModel):
    """Totals over a window of recent days."""

    days: int
    total_posts: int
    total_users: int
    average_daily_posts: float
    top_moods: list[MoodCountResponse]

    model_config = ConfigDict(from_attributes=True)


class UsageResponse(BaseModel):
    """Today's backing-store operation counts against the daily quotas."""

    date: str
    daily_reads: int
    daily_writes: int
    read_limit: int
    write_limit: int
    read_level: str
    write_level: str
