"""Viewer-side feed state with optimistic reaction toggles.

A ``FeedState`` belongs to one viewer. Toggling a reaction updates the local
view immediately and queues the change on the reaction batcher. Each toggle is
remembered by the batcher sequence number of its entry; when a fresh server
snapshot arrives, toggles the store already committed are forgotten and the
remaining ones are re-applied on top, so the view never flickers back to a
stale count while a flush is pending.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from campus_mood.core.vocabulary import REACTION_IDS
from campus_mood.db.time import as_utc
from campus_mood.models import Post
from campus_mood.services.reaction_batcher import ReactionBatcher
from campus_mood.services.reactions import ReactionBatchEntry


@dataclass(frozen=True)
class ReactionView:
    count: int = 0
    user_reacted: bool = False

    def toggled(self, reacted: bool) -> ReactionView:
        if reacted == self.user_reacted:
            return self
        count = self.count + 1 if reacted else max(0, self.count - 1)
        return ReactionView(count=count, user_reacted=reacted)


@dataclass
class PostView:
    """A post as one viewer sees it. The author is never exposed."""

    id: str
    mood: str
    text: str
    created_at: datetime
    is_challenge: bool
    challenge_id: str | None
    reactions: dict[str, ReactionView] = field(default_factory=dict)

    @classmethod
    def from_post(cls, post: Post, viewer_id: str | None) -> PostView:
        reactions: dict[str, ReactionView] = {}
        stored = post.reactions or {}
        for kind in REACTION_IDS:
            users = (stored.get(kind) or {}).get("users") or []
            reactions[kind] = ReactionView(
                count=len(users),
                user_reacted=viewer_id is not None and viewer_id in users,
            )
        return cls(
            id=post.id,
            mood=post.mood,
            text=post.text,
            created_at=as_utc(post.created_at),
            is_challenge=post.is_challenge,
            challenge_id=post.challenge_id,
            reactions=reactions,
        )


@dataclass(frozen=True)
class _PendingToggle:
    seq: int
    reacted: bool


class FeedState:
    """Ordered list of post views plus the viewer's unconfirmed toggles."""

    def __init__(self, user_id: str, batcher: ReactionBatcher) -> None:
        self.user_id = user_id
        self._batcher = batcher
        self.posts: list[PostView] = []
        self._pending: dict[tuple[str, str], _PendingToggle] = {}

    @property
    def pending_toggles(self) -> int:
        return len(self._pending)

    def find(self, post_id: str) -> PostView | None:
        return next((view for view in self.posts if view.id == post_id), None)

    def toggle(self, post_id: str, reaction: str) -> ReactionBatchEntry | None:
        """Flip the viewer's ``reaction`` on a post and queue the change.

        Returns the queued entry, or None when the post is not in the feed.

        Raises:
            ReactionValidationError: If ``reaction`` is not a known kind.
        """
        view = self.find(post_id)
        if view is None:
            return None

        current = view.reactions.get(reaction, ReactionView())
        reacted = not current.user_reacted
        if reacted:
            entry = self._batcher.add(post_id, reaction, self.user_id)
        else:
            entry = self._batcher.remove(post_id, reaction, self.user_id)

        view.reactions[reaction] = current.toggled(reacted)
        self._pending[(post_id, reaction)] = _PendingToggle(seq=entry.seq, reacted=reacted)
        return entry

    def reconcile(self, posts: Iterable[Post | PostView], as_of_seq: int) -> None:
        """Replace the feed with a server snapshot.

        ``as_of_seq`` is the highest batcher sequence number the snapshot is
        known to include; toggles at or below it are settled.
        """
        self._settle(as_of_seq)
        self.posts = [self._overlay(self._as_view(post)) for post in posts]

    def append(self, posts: Iterable[Post | PostView]) -> None:
        """Add an older page below the current feed, skipping posts already shown."""
        seen = {view.id for view in self.posts}
        for post in posts:
            view = self._as_view(post)
            if view.id in seen:
                continue
            seen.add(view.id)
            self.posts.append(self._overlay(view))

    def _settle(self, as_of_seq: int) -> None:
        self._pending = {
            key: pending for key, pending in self._pending.items() if pending.seq > as_of_seq
        }

    def _as_view(self, post: Post | PostView) -> PostView:
        if isinstance(post, PostView):
            return PostView(
                id=post.id,
                mood=post.mood,
                text=post.text,
                created_at=post.created_at,
                is_challenge=post.is_challenge,
                challenge_id=post.challenge_id,
                reactions=dict(post.reactions),
            )
        return PostView.from_post(post, self.user_id)

    def _overlay(self, view: PostView) -> PostView:
        for (post_id, reaction), pending in self._pending.items():
            if post_id != view.id:
                continue
            server = view.reactions.get(reaction, ReactionView())
            view.reactions[reaction] = server.toggled(pending.reacted)
        return view
