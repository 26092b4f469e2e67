"""Periodic housekeeping for the feed.

This module provides the MaintenanceWorker class, which runs in the background
and keeps stored data within its retention window. Each cycle it:

- Deletes posts whose retention period has passed
- Recounts today's active users from the posts still stored
- Flags users who have not been active recently
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from campus_mood.core.clock import Clock, day_key
from campus_mood.core.errors import StoreError
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.daily_stats import DailyAggregator
from campus_mood.services.identity import IdentityService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaintenanceReport:
    """What one maintenance cycle changed."""

    expired_posts: int = 0
    active_users: int | None = None
    inactive_users: int = 0


class MaintenanceWorker:
    """Runs the retention sweep and stats refresh on a fixed interval."""

    def __init__(
        self,
        store: PostStore,
        aggregator: DailyAggregator,
        identity: IdentityService,
        clock: Clock,
        *,
        interval: float = 3600.0,
        batch_size: int = 100,
    ) -> None:
        """Initialize the maintenance worker.

        Args:
            store: Post store to sweep.
            aggregator: Aggregator whose active-user counts get refreshed.
            identity: Identity service used to flag inactive users.
            clock: Source of "now" and "today".
            interval: Seconds between cycles.
            batch_size: Maximum posts deleted per transaction.
        """
        self._store = store
        self._aggregator = aggregator
        self._identity = identity
        self._clock = clock
        self.interval = interval
        self.batch_size = batch_size
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background maintenance loop."""

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background maintenance loop."""

        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    async def sweep_expired(self) -> int:
        """Delete expired posts in batches until a batch comes back short."""
        total = 0
        while not self._stopping.is_set():
            removed = await self._store.clean_expired(self.batch_size)
            total += removed
            if removed < self.batch_size:
                break
        return total

    async def run_once(self) -> MaintenanceReport:
        expired = await self.sweep_expired()
        active = await self._aggregator.refresh_active_users(day_key(self._clock.today()))
        inactive = await self._identity.mark_inactive_users()
        if expired:
            logger.info("Cleaned up %d expired posts", expired)
        return MaintenanceReport(expired_posts=expired, active_users=active, inactive_users=inactive)

    async def _run(self) -> None:
        interval = max(0.1, float(self.interval))

        while not self._stopping.is_set():
            try:
                await self.run_once()
            except StoreError as e:
                logger.warning("MaintenanceWorker encountered store error: %s", e)
            except (OSError, ConnectionError, TimeoutError) as e:
                logger.warning("MaintenanceWorker encountered network error: %s", e)

            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=interval)
            except TimeoutError:
                continue
