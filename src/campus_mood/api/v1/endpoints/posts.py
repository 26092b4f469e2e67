# src/campus_mood/api/v1/endpoints/posts.py
"""Post-related endpoints for the Campus Mood API."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status

from campus_mood.api.v1.dependencies import CurrentIdentityDep, ServicesDep
from campus_mood.models import Post
from campus_mood.repositories.post_store import PageCursor
from campus_mood.schemas.post import (
    PostCreate,
    PostPageResponse,
    PostResponse,
    ReactionQueuedResponse,
    ReactionRequest,
    ReactionState,
)
from campus_mood.services.feed_state import PostView
from campus_mood.services.reactions import ReactionAction

router = APIRouter(prefix="/posts", tags=["posts"])


def to_post_response(post: Post | PostView, viewer_id: str | None) -> PostResponse:
    """Render a post for one viewer, hiding the author."""
    view = post if isinstance(post, PostView) else PostView.from_post(post, viewer_id)
    return PostResponse(
        id=view.id,
        mood=view.mood,
        text=view.text,
        created_at=view.created_at,
        is_challenge=view.is_challenge,
        challenge_id=view.challenge_id,
        reactions={
            kind: ReactionState(count=state.count, user_reacted=state.user_reacted)
            for kind, state in view.reactions.items()
        },
    )


@router.get("/", response_model=PostPageResponse)
async def list_posts(
    identity: CurrentIdentityDep,
    services: ServicesDep,
    cursor: str | None = Query(None, description="Cursor returned with the previous page"),
    limit: int | None = Query(None, ge=1, le=100, description="Maximum number of posts to return"),
) -> PostPageResponse:
    """List posts newest first, one page at a time."""
    start_after = None
    if cursor:
        try:
            start_after = PageCursor.decode(cursor)
        except ValueError as err:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    page = await services.store.load_posts(start_after, limit)
    return PostPageResponse(
        posts=[to_post_response(post, identity.user_id) for post in page.posts],
        next_cursor=page.cursor.encode() if page.cursor and page.has_more else None,
        has_more=page.has_more,
    )


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    identity: CurrentIdentityDep,
    services: ServicesDep,
) -> PostResponse:
    """Create a new post.

    Rejected with 400 on an invalid mood or text, 429 once the daily limit is
    reached and 503 if the post could not be saved.
    """
    post = await services.posts.submit(
        identity.user_id,
        post_data.mood,
        post_data.text,
        post_data.is_challenge,
    )
    return to_post_response(post, identity.user_id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, identity: CurrentIdentityDep, services: ServicesDep) -> PostResponse:
    post = await services.store.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return to_post_response(post, identity.user_id)


@router.post(
    "/{post_id}/reactions",
    response_model=ReactionQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def react_to_post(
    post_id: str,
    reaction_data: ReactionRequest,
    identity: CurrentIdentityDep,
    services: ServicesDep,
) -> ReactionQueuedResponse:
    """Queue adding or removing the caller's reaction.

    The change is written on the next batch flush; a post that expires in the
    meantime is skipped.
    """
    batcher = services.batcher
    if reaction_data.reaction_action is ReactionAction.ADD:
        entry = batcher.add(post_id, reaction_data.reaction, identity.user_id)
    else:
        entry = batcher.remove(post_id, reaction_data.reaction, identity.user_id)

    return ReactionQueuedResponse(
        post_id=entry.post_id,
        reaction=entry.reaction,
        action=entry.action.value,
        seq=entry.seq,
        pending=batcher.pending,
    )
