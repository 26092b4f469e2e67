# src/campus_mood/api/v1/endpoints/auth.py
"""Authentication endpoints for the Campus Mood API."""

from __future__ import annotations

from fastapi import APIRouter

from campus_mood.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from campus_mood.api.v1.endpoints.users import to_user_response
from campus_mood.schemas.user import UserResponse

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/sign-in", response_model=UserResponse)
async def sign_in(identity: CurrentIdentityDep, services: ServicesDep) -> UserResponse:
    """Record a sign-in vouched for by the identity provider.

    Creates the user on first sign-in and refreshes ``last_active`` afterwards.
    The daily post counter is not touched here.
    """
    user = await services.identity.sign_in(identity)
    return to_user_response(user, services)
