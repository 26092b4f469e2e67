# src/campus_mood/models/post.py
"""SQLAlchemy model for mood posts and their reaction document."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_mood.db.session import Base


def _new_post_id() -> str:
    return uuid.uuid4().hex


class Post(Base):
    """A mood post.

    Reactions live in a single JSON document on the row,
    ``{reaction_id: {"count": int, "users": [user_id, ...]}}``, so applying a
    whole batch of reaction changes to a post costs one write.
    """

    __tablename__ = "post"
    __table_args__ = (
        # Feed order and the start-after cursor both walk (created_at, id) descending.
        Index("ix_post_created_at_id", "created_at", "id"),
        Index("ix_post_expires_at", "expires_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_post_id)
    # Opaque identity-provider id; never returned by read APIs.
    author_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    mood: Mapped[str] = mapped_column(String(32), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_challenge: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    challenge_id: Mapped[str | None] = mapped_column(String(16), nullable=True)
    reactions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def voters(self, reaction_id: str) -> list[str]:
        """Return the user ids that reacted with ``reaction_id``."""
        entry = (self.reactions or {}).get(reaction_id) or {}
        return list(entry.get("users", []))

    def reaction_count(self, reaction_id: str) -> int:
        entry = (self.reactions or {}).get(reaction_id) or {}
        return int(entry.get("count", 0))
