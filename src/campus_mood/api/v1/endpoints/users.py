# src/campus_mood/api/v1/endpoints/users.py
"""User profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from campus_mood.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from campus_mood.models import User
from campus_mood.schemas.user import DailyLimitResponse, UserResponse
from campus_mood.services.container import ServiceContainer

router = APIRouter(prefix="/users", tags=["users"])


def to_user_response(user: User, services: ServiceContainer) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        created_at=user.created_at,
        last_active=user.last_active,
        total_posts=user.total_posts,
        posts_today=services.gate.posts_today(user),
        is_active=user.is_active,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(identity: CurrentIdentityDep, services: ServicesDep) -> UserResponse:
    user = await services.identity.get_user(identity.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return to_user_response(user, services)


@router.get("/me/daily-limit", response_model=DailyLimitResponse)
async def get_daily_limit(identity: CurrentIdentityDep, services: ServicesDep) -> DailyLimitResponse:
    """Return whether the caller may post today and how many posts remain."""
    limit = await services.gate.check_daily_limit(identity.user_id)
    return DailyLimitResponse(
        can_post=limit.can_post,
        remaining=limit.remaining,
        limit=services.gate.daily_limit,
    )
