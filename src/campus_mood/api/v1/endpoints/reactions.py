# src/campus_mood/api/v1/endpoints/reactions.py
"""Control of the reaction batch queue."""

from __future__ import annotations

from fastapi import APIRouter

from campus_mood.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from campus_mood.schemas.post import FlushResponse

router = APIRouter(prefix="/reactions", tags=["reactions"])


@router.post("/flush", response_model=FlushResponse)
async def flush_reactions(identity: CurrentIdentityDep, services: ServicesDep) -> FlushResponse:
    """Write queued reactions now instead of waiting for the batch timer.

    A failed flush keeps the queue and is retried on the regular interval.
    """
    batcher = services.batcher
    result = await batcher.flush_now()
    return FlushResponse(
        success=result.success,
        entries=result.entries,
        posts=result.posts,
        committed_seq=batcher.committed_seq,
        pending=batcher.pending,
    )
