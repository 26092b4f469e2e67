# src/campus_mood/api/v1/endpoints/system.py
"""Vocabulary and configuration endpoints for clients."""

from __future__ import annotations

from fastapi import APIRouter

from campus_mood.api.v1.dependencies import ServicesDep
from campus_mood.core.clock import day_key
from campus_mood.core.settings import settings
from campus_mood.core.vocabulary import MOOD_OPTIONS, REACTION_OPTIONS, daily_challenge
from campus_mood.schemas.system import (
    ChallengeResponse,
    MoodOptionResponse,
    ReactionOptionResponse,
    VocabularyResponse,
)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/vocabulary", response_model=VocabularyResponse)
async def get_vocabulary(services: ServicesDep) -> VocabularyResponse:
    """Return the moods, reactions and today's challenge prompt.

    Returns:
        Closed vocabularies plus the posting limits clients should enforce locally
    """
    today = services.clock.today()
    index, prompt = daily_challenge(today)
    return VocabularyResponse(
        moods=[MoodOptionResponse.model_validate(option) for option in MOOD_OPTIONS],
        reactions=[ReactionOptionResponse.model_validate(option) for option in REACTION_OPTIONS],
        challenge=ChallengeResponse(id=str(index), prompt=prompt, date=day_key(today)),
        max_text_length=services.posts.max_text_length,
        daily_post_limit=services.gate.daily_limit,
    )


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "debug": settings.debug,
        },
        "posts": {
            "daily_limit": settings.daily_post_limit,
            "max_text_length": settings.max_text_length,
            "page_size": settings.posts_per_page,
            "retention_days": settings.post_retention_days,
        },
        "reactions": {
            "batch_interval_seconds": settings.reaction_batch_interval_seconds,
        },
        "auth": {
            "dev_mode_email_policy": settings.dev_mode_email_policy,
        },
    }
