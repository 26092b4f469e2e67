"""Incremental per-day mood statistics."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock, day_key, parse_day_key, recent_day_keys
from campus_mood.core.errors import StoreError
from campus_mood.models import DailyStats
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.usage_meter import UsageMeter

logger = logging.getLogger(__name__)


def top_mood(breakdown: Mapping[str, int]) -> str:
    """Return the mood with the highest count.

    Ties go to the lexicographically smallest mood id so the answer does not
    depend on how the mapping happened to be built.
    """
    if not breakdown:
        raise ValueError("Empty mood breakdown")
    mood, _ = min(breakdown.items(), key=lambda item: (-item[1], item[0]))
    return mood


@dataclass(frozen=True)
class MoodCount:
    mood: str
    count: int


@dataclass(frozen=True)
class StatsSummary:
    """Campus-wide numbers over a window of recent days."""

    days: int
    total_posts: int
    total_users: int
    average_daily_posts: float
    top_moods: list[MoodCount] = field(default_factory=list)


class DailyAggregator:
    """Maintains one ``DailyStats`` row per calendar day without rescanning posts."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        store: PostStore | None = None,
        meter: UsageMeter | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._store = store
        self._meter = meter
        self._lock = asyncio.Lock()

    async def record_post(
        self,
        mood: str,
        is_challenge: bool,
        *,
        first_post_of_user: bool = False,
    ) -> DailyStats:
        """Fold one new post into today's statistics.

        ``first_post_of_user`` marks the author's first post of the day and
        bumps the active-user count on days that already have a record.
        """
        today = day_key(self._clock.today())
        now = self._clock.now()
        try:
            async with self._lock, self._session_factory.begin() as session:
                stats = await session.get(DailyStats, today)
                if stats is None:
                    stats = DailyStats(
                        date=today,
                        total_posts=1,
                        mood_breakdown={mood: 1},
                        active_users=1,
                        challenge_posts=1 if is_challenge else 0,
                        top_mood=mood,
                        created_at=now,
                        updated_at=now,
                    )
                    session.add(stats)
                else:
                    breakdown = dict(stats.mood_breakdown or {})
                    breakdown[mood] = breakdown.get(mood, 0) + 1
                    stats.mood_breakdown = breakdown
                    stats.total_posts += 1
                    if is_challenge:
                        stats.challenge_posts += 1
                    if first_post_of_user:
                        stats.active_users += 1
                    stats.top_mood = top_mood(breakdown)
                    stats.updated_at = now
        except SQLAlchemyError as exc:
            logger.exception("Error updating daily stats")
            raise StoreError() from exc

        await self._track(reads=1, writes=1)
        return stats

    async def get_daily_stats(self, date: str) -> DailyStats | None:
        """Return the record for ``date`` (YYYY-MM-DD), or None when there is no data."""
        parse_day_key(date)
        try:
            async with self._session_factory() as session:
                stats = await session.get(DailyStats, date)
        except SQLAlchemyError as exc:
            logger.exception("Error getting daily stats")
            raise StoreError() from exc

        await self._track(reads=1)
        return stats

    async def get_recent_stats(self, days: int = 7) -> list[DailyStats]:
        """Return records for the last ``days`` days including today, newest first.

        Days without a record are omitted.
        """
        if days <= 0:
            return []
        keys = recent_day_keys(self._clock, days)
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(DailyStats).where(DailyStats.date.in_(keys)))
                rows = list(result.scalars())
        except SQLAlchemyError as exc:
            logger.exception("Error getting recent stats")
            raise StoreError() from exc

        await self._track(reads=len(rows))
        return sorted(rows, key=lambda stats: stats.date, reverse=True)

    async def get_summary(self, days: int = 30) -> StatsSummary:
        recent = await self.get_recent_stats(days)
        total_posts = sum(stats.total_posts for stats in recent)

        mood_counts: dict[str, int] = {}
        for stats in recent:
            for mood, count in (stats.mood_breakdown or {}).items():
                mood_counts[mood] = mood_counts.get(mood, 0) + count
        ranked = sorted(mood_counts.items(), key=lambda item: (-item[1], item[0]))

        return StatsSummary(
            days=days,
            total_posts=total_posts,
            # Upper bound without a user scan: the busiest day's distinct authors.
            total_users=max((stats.active_users for stats in recent), default=0),
            average_daily_posts=total_posts / len(recent) if recent else 0.0,
            top_moods=[MoodCount(mood, count) for mood, count in ranked[:5]],
        )

    async def refresh_active_users(self, date: str) -> int | None:
        """Recount distinct authors for ``date`` from the posts still stored.

        Returns the new count, or None when the day has no record to update.
        """
        if self._store is None:
            raise RuntimeError("refresh_active_users needs a post store")

        day = parse_day_key(date)
        start = self._clock.start_of_day(day)
        end = self._clock.start_of_day(day + timedelta(days=1))
        authors = await self._store.count_authors_between(start, end)

        try:
            async with self._lock, self._session_factory.begin() as session:
                stats = await session.get(DailyStats, date)
                if stats is None:
                    return None
                stats.active_users = authors
                stats.updated_at = self._clock.now()
        except SQLAlchemyError as exc:
            logger.exception("Error updating active users count")
            raise StoreError() from exc

        await self._track(reads=1, writes=1)
        return authors

    async def _track(self, *, reads: int = 0, writes: int = 0) -> None:
        if self._meter is None:
            return
        await self._meter.track("read", reads)
        await self._meter.track("write", writes)
