"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Profile counters of the signed-in user."""

    id: str
    email: str | None
    display_name: str
    created_at: datetime
    last_active: datetime
    total_posts: int
    posts_today: int = Field(..., description="Posts counted against today's limit")
    is_active: bool


class DailyLimitResponse(BaseModel):
    """Whether the caller may post again today."""

    can_post: bool
    remaining: int
    limit: int
