"""Data access for posts: creation, paginated and live reads, reaction writes, retention."""
from __future__ import annotations

import base64
import itertools
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock
from campus_mood.core.errors import StoreError
from campus_mood.core.vocabulary import empty_reactions
from campus_mood.db.time import as_utc
from campus_mood.models import Post
from campus_mood.services.reactions import ReactionBatchEntry, apply_entries
from campus_mood.services.usage_meter import Operation, UsageMeter

__all__ = ["PageCursor", "PostPage", "PostStore"]

logger = logging.getLogger(__name__)

# Receives the newest posts and the highest reaction entry seq they include.
PostsCallback = Callable[[list[Post], int], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class PageCursor:
    """Start-after position in the newest-first feed."""

    created_at: datetime
    post_id: str

    @classmethod
    def after(cls, post: Post) -> PageCursor:
        return cls(created_at=as_utc(post.created_at), post_id=post.id)

    def encode(self) -> str:
        raw = f"{as_utc(self.created_at).isoformat()}|{self.post_id}".encode()
        return base64.urlsafe_b64encode(raw).decode().rstrip("=")

    @classmethod
    def decode(cls, token: str) -> PageCursor:
        """Parse a token produced by ``encode``.

        Raises:
            ValueError: If the token is malformed.
        """
        padding = "=" * (-len(token) % 4)
        try:
            raw = base64.urlsafe_b64decode(token + padding).decode()
            stamp, post_id = raw.split("|", 1)
            created_at = as_utc(datetime.fromisoformat(stamp))
        except (ValueError, UnicodeDecodeError) as err:
            raise ValueError("Invalid cursor") from err
        if not post_id:
            raise ValueError("Invalid cursor")
        return cls(created_at=created_at, post_id=post_id)


@dataclass(frozen=True)
class PostPage:
    posts: list[Post]
    cursor: PageCursor | None
    has_more: bool


@dataclass
class _Subscription:
    callback: PostsCallback
    on_error: ErrorCallback | None
    limit: int


class PostStore:
    """Owns post rows end to end.

    Every round-trip is reported to the usage meter: rows fetched count as
    reads, rows inserted, updated or deleted count as writes.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        meter: UsageMeter | None = None,
        retention_days: int = 7,
        page_size: int = 20,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._meter = meter
        self.retention = timedelta(days=retention_days)
        self.page_size = page_size
        self._subscribers: dict[int, _Subscription] = {}
        self._subscription_ids = itertools.count(1)
        # Highest reaction entry seq committed through apply_reaction_batch.
        self.committed_reaction_seq = 0

    async def _track(self, operation: Operation, count: int) -> None:
        if self._meter is not None and count > 0:
            await self._meter.track(operation, count)

    # --- writes -------------------------------------------------------------------

    async def create_post(
        self,
        *,
        author_id: str,
        mood: str,
        text: str,
        is_challenge: bool = False,
        challenge_id: str | None = None,
    ) -> Post:
        """Insert a post with every reaction kind initialized to zero voters."""
        now = self._clock.now()
        post = Post(
            id=uuid.uuid4().hex,
            author_id=author_id,
            mood=mood,
            text=text.strip(),
            created_at=now,
            is_challenge=is_challenge,
            challenge_id=challenge_id,
            reactions=empty_reactions(),
            expires_at=now + self.retention,
        )
        try:
            async with self._session_factory.begin() as session:
                session.add(post)
        except SQLAlchemyError as exc:
            logger.exception("Error creating post")
            raise StoreError("Failed to create post. Please try again.") from exc

        await self._track("write", 1)
        await self._publish()
        return post

    async def apply_reaction_batch(
        self,
        groups: Mapping[str, Sequence[ReactionBatchEntry]],
        *,
        through_seq: int = 0,
    ) -> int:
        """Apply queued reaction entries, one write per post, in one transaction.

        Posts that no longer exist are skipped. Either every touched post is
        committed or none is. ``through_seq`` is the highest entry seq in the
        batch; live snapshots fetched after the commit report it.

        Returns:
            Number of posts written.

        Raises:
            StoreError: If the transaction fails; nothing was committed.
        """
        if not groups:
            return 0

        written = 0
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(select(Post).where(Post.id.in_(list(groups))))
                posts = {post.id: post for post in result.scalars()}
                for post_id, entries in groups.items():
                    post = posts.get(post_id)
                    if post is None:
                        logger.debug("Skipping %d reactions for missing post %s", len(entries), post_id)
                        continue
                    post.reactions = apply_entries(post.reactions, entries)
                    written += 1
        except SQLAlchemyError as exc:
            raise StoreError("Failed to save reactions") from exc

        self.committed_reaction_seq = max(self.committed_reaction_seq, through_seq)
        await self._track("read", len(posts))
        await self._track("write", written)
        if written:
            await self._publish()
        return written

    async def clean_expired(self, limit: int = 100) -> int:
        """Delete up to ``limit`` posts whose expiration time has passed."""
        now = self._clock.now()
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(
                    select(Post.id).where(Post.expires_at < now).limit(limit)
                )
                expired = list(result.scalars())
                if expired:
                    await session.execute(delete(Post).where(Post.id.in_(expired)))
        except SQLAlchemyError as exc:
            logger.exception("Error cleaning old posts")
            raise StoreError() from exc

        await self._track("read", len(expired))
        await self._track("write", len(expired))
        if expired:
            logger.info("Cleaned up %d old posts", len(expired))
            await self._publish()
        return len(expired)

    # --- reads --------------------------------------------------------------------

    async def load_posts(
        self,
        cursor: PageCursor | None = None,
        page_size: int | None = None,
    ) -> PostPage:
        """Return one newest-first page starting after ``cursor``.

        One extra row is fetched to learn whether another page exists.
        """
        size = page_size or self.page_size
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc()).limit(size + 1)
        if cursor is not None:
            stmt = stmt.where(
                or_(
                    Post.created_at < cursor.created_at,
                    and_(Post.created_at == cursor.created_at, Post.id < cursor.post_id),
                )
            )
        rows = await self._fetch(stmt)
        await self._track("read", len(rows))

        has_more = len(rows) > size
        posts = rows[:size]
        next_cursor = PageCursor.after(posts[-1]) if posts else None
        return PostPage(posts=posts, cursor=next_cursor, has_more=has_more)

    async def get_post(self, post_id: str) -> Post | None:
        posts = await self.get_posts([post_id])
        return posts.get(post_id)

    async def get_posts(self, post_ids: Iterable[str]) -> dict[str, Post]:
        ids = list(dict.fromkeys(post_ids))
        if not ids:
            return {}
        rows = await self._fetch(select(Post).where(Post.id.in_(ids)))
        await self._track("read", len(rows))
        return {post.id: post for post in rows}

    async def count_authors_between(self, start: datetime, end: datetime) -> int:
        """Return the number of distinct authors who posted in ``[start, end)``."""
        stmt = select(func.count(func.distinct(Post.author_id))).where(
            Post.created_at >= start,
            Post.created_at < end,
        )
        try:
            async with self._session_factory() as session:
                count = (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError as exc:
            raise StoreError() from exc
        await self._track("read", 1)
        return int(count or 0)

    async def _fetch(self, stmt) -> list[Post]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars())
        except SQLAlchemyError as exc:
            logger.exception("Error loading posts")
            raise StoreError() from exc

    # --- live subscription --------------------------------------------------------

    async def subscribe_recent(
        self,
        callback: PostsCallback,
        on_error: ErrorCallback | None = None,
        limit: int | None = None,
    ) -> Unsubscribe:
        """Deliver the newest posts now and again after every post mutation.

        The callback also receives the reaction entry seq read before the
        snapshot was fetched, so every entry at or below it is reflected.

        Returns a function that stops further deliveries.
        """
        subscription_id = next(self._subscription_ids)
        subscription = _Subscription(callback, on_error, limit or self.page_size)
        self._subscribers[subscription_id] = subscription

        def unsubscribe() -> None:
            self._subscribers.pop(subscription_id, None)

        await self._deliver(subscription_id, subscription, {})
        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def _publish(self) -> None:
        snapshots: dict[int, tuple[int, list[Post]]] = {}
        for subscription_id, subscription in list(self._subscribers.items()):
            await self._deliver(subscription_id, subscription, snapshots)

    async def _deliver(
        self,
        subscription_id: int,
        subscription: _Subscription,
        snapshots: dict[int, tuple[int, list[Post]]],
    ) -> None:
        if subscription_id not in self._subscribers:
            return
        try:
            if subscription.limit not in snapshots:
                as_of_seq = self.committed_reaction_seq
                rows = await self._fetch(
                    select(Post)
                    .order_by(Post.created_at.desc(), Post.id.desc())
                    .limit(subscription.limit)
                )
                await self._track("read", len(rows))
                snapshots[subscription.limit] = (as_of_seq, rows)
        except StoreError as exc:
            logger.error("Error in posts subscription %d: %s", subscription_id, exc)
            await self._notify_error(subscription_id, subscription, exc)
            return

        if subscription_id not in self._subscribers:
            return
        as_of_seq, rows = snapshots[subscription.limit]
        try:
            await subscription.callback(list(rows), as_of_seq)
        except Exception as exc:
            logger.exception("Posts subscriber %d failed", subscription_id)
            await self._notify_error(subscription_id, subscription, exc)

    async def _notify_error(
        self,
        subscription_id: int,
        subscription: _Subscription,
        exc: Exception,
    ) -> None:
        if subscription.on_error is None or subscription_id not in self._subscribers:
            return
        try:
            await subscription.on_error(exc)
        except Exception:
            logger.exception("Error handler of posts subscription %d failed", subscription_id)
