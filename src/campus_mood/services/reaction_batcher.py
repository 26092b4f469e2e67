"""In-memory reaction queue that coalesces toggles into one write per post.

Reactions are the hottest write path in the feed. Rather than writing every
tap, the batcher queues add/remove entries and drains them on a timer (or on
demand) as a single transaction that writes each affected post once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from campus_mood.core.clock import Clock, SystemClock
from campus_mood.core.errors import ReactionValidationError, StoreError
from campus_mood.core.vocabulary import is_reaction
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.reactions import ReactionAction, ReactionBatchEntry, group_by_post
from campus_mood.services.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlushResult:
    """Outcome of one flush attempt."""

    success: bool
    entries: int = 0
    posts: int = 0


class ReactionBatcher:
    """Queues reaction toggles and flushes them to the post store.

    Only one flush timer is pending at a time. A failed flush keeps the whole
    queue and re-arms the timer, so delivery is retried every ``interval``
    seconds until the store accepts it.
    """

    def __init__(
        self,
        store: PostStore,
        scheduler: Scheduler,
        *,
        interval: float = 30.0,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self.interval = interval
        self._clock = clock or SystemClock()
        self._queue: list[ReactionBatchEntry] = []
        self._timer: TimerHandle | None = None
        self._flush_lock = asyncio.Lock()
        self._last_seq = 0
        # Highest entry seq known to be committed to the store.
        self.committed_seq = 0

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    def add(self, post_id: str, reaction: str, user_id: str) -> ReactionBatchEntry:
        """Queue adding ``user_id`` to the voters of ``reaction`` on a post."""
        return self._enqueue(post_id, reaction, user_id, ReactionAction.ADD)

    def remove(self, post_id: str, reaction: str, user_id: str) -> ReactionBatchEntry:
        """Queue removing ``user_id`` from the voters of ``reaction`` on a post."""
        return self._enqueue(post_id, reaction, user_id, ReactionAction.REMOVE)

    def _enqueue(
        self,
        post_id: str,
        reaction: str,
        user_id: str,
        action: ReactionAction,
    ) -> ReactionBatchEntry:
        if not is_reaction(reaction):
            raise ReactionValidationError(f"Unknown reaction: {reaction}")

        self._last_seq += 1
        entry = ReactionBatchEntry(
            post_id=post_id,
            reaction=reaction,
            user_id=user_id,
            action=action,
            timestamp=self._clock.now().timestamp(),
            seq=self._last_seq,
        )
        self._queue.append(entry)
        if self._timer is None:
            self._arm()
        return entry

    def _arm(self) -> None:
        self._timer = self._scheduler.call_later(self.interval, self._on_timer)

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _on_timer(self) -> None:
        self._timer = None
        await self.flush()

    async def flush(self) -> FlushResult:
        """Write every queued entry, grouped per post, as one atomic batch.

        Entries queued while the write is in flight are left for the next cycle.
        Store failures are logged and retried on the next timer tick.
        """
        async with self._flush_lock:
            batch = list(self._queue)
            if not batch:
                return FlushResult(success=True)

            try:
                written = await self._store.apply_reaction_batch(
                    group_by_post(batch),
                    through_seq=batch[-1].seq,
                )
            except (StoreError, OSError, ConnectionError, TimeoutError) as exc:
                logger.warning(
                    "Error processing %d batched reactions, retrying in %.1fs: %s",
                    len(batch),
                    self.interval,
                    exc,
                    exc_info=True,
                )
                if self._timer is None:
                    self._arm()
                return FlushResult(success=False)

            # Capture-then-clear: only the snapshot taken above leaves the queue.
            del self._queue[: len(batch)]
            self.committed_seq = max(self.committed_seq, batch[-1].seq)
            logger.info("Processed %d reactions for %d posts", len(batch), written)

            if not self._queue:
                self._disarm()
            elif self._timer is None:
                self._arm()
            return FlushResult(success=True, entries=len(batch), posts=written)

    async def flush_now(self) -> FlushResult:
        """Cancel the pending timer and flush immediately."""
        self._disarm()
        return await self.flush()

    async def close(self) -> None:
        """Force-flush at session end. Entries that still fail are dropped."""
        await self.flush_now()
        self._disarm()
        if self._queue:
            logger.warning("Dropping %d unflushed reactions at shutdown", len(self._queue))
            self._queue.clear()
