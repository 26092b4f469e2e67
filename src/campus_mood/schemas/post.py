# src/campus_mood/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from campus_mood.services.reactions import ReactionAction


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    mood: str = Field(..., description="Mood id from the mood vocabulary")
    text: str = Field("", description="Optional short text, trimmed before length checks")
    is_challenge: bool = Field(False, description="Answers today's daily challenge")


class ReactionState(BaseModel):
    """Count of one reaction kind and whether the viewer is among its voters."""

    count: int
    user_reacted: bool

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    """Schema for a post as returned to one viewer. The author is never included."""

    id: str
    mood: str
    text: str
    created_at: datetime
    is_challenge: bool
    challenge_id: str | None = None
    reactions: dict[str, ReactionState]

    model_config = ConfigDict(from_attributes=True)


class PostPageResponse(BaseModel):
    """One newest-first page of the feed."""

    posts: list[PostResponse]
    next_cursor: str | None = Field(None, description="Opaque token for the next page")
    has_more: bool


class ReactionRequest(BaseModel):
    """Queue adding or removing the caller's reaction on a post."""

    reaction: str = Field(..., description="Reaction id from the reaction vocabulary")
    action: Literal["add", "remove"] = Field("add", description="Whether to add or remove")

    @property
    def reaction_action(self) -> ReactionAction:
        return ReactionAction(self.action)


class ReactionQueuedResponse(BaseModel):
    """Acknowledgement that a reaction change was queued for the next flush."""

    post_id: str
    reaction: str
    action: str
    seq: int
    pending: int


class FlushResponse(BaseModel):
    success: bool
    entries: int
    posts: int
    committed_seq: int
    pending: int
