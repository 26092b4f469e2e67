"""Per-user daily post limit tied to calendar-day boundaries.

This module is the only place that knows how the daily counter resets: a
stored ``last_post_date`` different from today's key means the stored count
belongs to an earlier day and is treated as zero.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock, day_key
from campus_mood.core.errors import StoreError
from campus_mood.models import User
from campus_mood.services.usage_meter import UsageMeter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyLimit:
    can_post: bool
    remaining: int


class QuotaGate:
    """Decides whether a user may post today and records accepted posts."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        daily_limit: int = 10,
        meter: UsageMeter | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self.daily_limit = daily_limit
        self._meter = meter
        self._lock = asyncio.Lock()

    def posts_today(self, user: User) -> int:
        """Return the user's effective post count for today without writing."""
        if user.last_post_date != day_key(self._clock.today()):
            return 0
        return user.daily_post_count

    def remaining_for(self, user: User) -> int:
        return max(0, self.daily_limit - self.posts_today(user))

    def _new_user(self, user_id: str, today: str) -> User:
        now = self._clock.now()
        return User(
            id=user_id,
            email=None,
            display_name="Anonymous Student",
            created_at=now,
            last_active=now,
            total_posts=0,
            daily_post_count=0,
            last_post_date=today,
            is_active=True,
        )

    async def _load_for_today(self, session: AsyncSession, user_id: str, today: str) -> tuple[User, bool]:
        """Fetch (or lazily create) the user with the day rollover applied.

        Returns the user and whether the row needs writing.
        """
        user = await session.get(User, user_id)
        if user is None:
            user = self._new_user(user_id, today)
            session.add(user)
            return user, True
        if user.last_post_date != today:
            logger.debug("Resetting daily post count for %s (last post day %s)", user_id, user.last_post_date)
            user.daily_post_count = 0
            user.last_post_date = today
            return user, True
        return user, False

    async def check_daily_limit(self, user_id: str) -> DailyLimit:
        """Return whether ``user_id`` may post today and how many posts remain.

        A side-effecting read: a rollover reset (or the creation of a missing
        user record) is persisted before answering.
        """
        today = day_key(self._clock.today())
        try:
            async with self._lock, self._session_factory.begin() as session:
                user, dirty = await self._load_for_today(session, user_id, today)
                count = user.daily_post_count
        except SQLAlchemyError as exc:
            logger.exception("Error checking daily post limit for %s", user_id)
            raise StoreError() from exc

        await self._track(dirty)
        remaining = max(0, self.daily_limit - count)
        return DailyLimit(can_post=remaining > 0, remaining=remaining)

    async def record_post(self, user_id: str) -> User:
        """Count one accepted post against today's allowance.

        Not idempotent: call exactly once per accepted post.
        """
        today = day_key(self._clock.today())
        try:
            async with self._lock, self._session_factory.begin() as session:
                user, _ = await self._load_for_today(session, user_id, today)
                user.daily_post_count += 1
                user.total_posts += 1
                user.last_active = self._clock.now()
                user.is_active = True
        except SQLAlchemyError as exc:
            logger.exception("Error recording post for %s", user_id)
            raise StoreError() from exc

        await self._track(True)
        return user

    async def _track(self, wrote: bool) -> None:
        if self._meter is None:
            return
        await self._meter.track("read", 1)
        if wrote:
            await self._meter.track("write", 1)
