"""Service-level orchestration for submitting posts."""
from __future__ import annotations

import asyncio
import logging
import weakref

from campus_mood.core.clock import Clock
from campus_mood.core.errors import DailyLimitExceededError, PostValidationError, StoreError
from campus_mood.core.vocabulary import daily_challenge, is_mood
from campus_mood.models import Post
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.daily_stats import DailyAggregator
from campus_mood.services.quota_gate import QuotaGate

logger = logging.getLogger(__name__)


class PostService:
    """Runs a submission through the quota gate, the store and the aggregator."""

    def __init__(
        self,
        store: PostStore,
        gate: QuotaGate,
        aggregator: DailyAggregator,
        clock: Clock,
        *,
        max_text_length: int = 100,
    ) -> None:
        self._store = store
        self._gate = gate
        self._aggregator = aggregator
        self._clock = clock
        self.max_text_length = max_text_length
        # Serializes submissions per author so the limit check and the count
        # update cannot interleave.
        self._author_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._author_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._author_locks[user_id] = lock
        return lock

    def validate(self, mood: str | None, text: str | None) -> str:
        """Return the trimmed text, or raise before anything is written.

        Raises:
            PostValidationError: If no known mood is selected or the text is too long.
        """
        if not mood:
            raise PostValidationError("Please select a mood")
        if not is_mood(mood):
            raise PostValidationError(f"Unknown mood: {mood}")
        cleaned = (text or "").strip()
        if len(cleaned) > self.max_text_length:
            raise PostValidationError(
                f"Text must be {self.max_text_length} characters or fewer"
            )
        return cleaned

    async def submit(
        self,
        user_id: str,
        mood: str | None,
        text: str | None = "",
        is_challenge: bool = False,
    ) -> Post:
        """Create a post for ``user_id``.

        Args:
            user_id: Opaque identity of the author.
            mood: Selected mood id.
            text: Optional short text.
            is_challenge: Whether the post answers today's challenge.

        Returns:
            The persisted post.

        Raises:
            PostValidationError: Invalid mood or text; nothing was written.
            DailyLimitExceededError: Today's allowance is used up; nothing was written.
            StoreError: The post could not be saved. Not retried automatically so a
                retry by the user cannot produce a duplicate.

        Notes:
            Once the post exists, failures to update the author's counters or the
            daily statistics are logged rather than raised.
        """
        cleaned = self.validate(mood, text)

        challenge_id = None
        if is_challenge:
            index, _ = daily_challenge(self._clock.today())
            challenge_id = str(index)

        async with self._lock_for(user_id):
            limit = await self._gate.check_daily_limit(user_id)
            if not limit.can_post:
                raise DailyLimitExceededError(self._gate.daily_limit)

            post = await self._store.create_post(
                author_id=user_id,
                mood=mood,
                text=cleaned,
                is_challenge=is_challenge,
                challenge_id=challenge_id,
            )

            first_post_of_user = False
            try:
                user = await self._gate.record_post(user_id)
                first_post_of_user = self._gate.posts_today(user) == 1
            except StoreError:
                logger.error(
                    "Post %s saved but the daily count for %s was not updated", post.id, user_id
                )

        try:
            await self._aggregator.record_post(
                post.mood,
                post.is_challenge,
                first_post_of_user=first_post_of_user,
            )
        except StoreError:
            logger.error("Post %s saved but daily stats were not updated", post.id)

        logger.debug("Created post %s (mood=%s, challenge=%s)", post.id, post.mood, post.is_challenge)
        return post
