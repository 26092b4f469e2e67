"""Sign-in bookkeeping for users vouched for by the identity provider."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock, day_key
from campus_mood.core.errors import EmailDomainNotAllowedError, StoreError
from campus_mood.core.security import IdentityClaims, is_allowed_email
from campus_mood.db.time import as_utc
from campus_mood.models import User
from campus_mood.services.usage_meter import UsageMeter

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Anonymous Student"


class IdentityService:
    """Creates and refreshes user records; enforces the college email policy."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock,
        *,
        allowed_domains: list[str] | None = None,
        inactive_days: int = 7,
        meter: UsageMeter | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self.allowed_domains = list(allowed_domains or [])
        self.inactive_after = timedelta(days=inactive_days)
        self._meter = meter
        self._lock = asyncio.Lock()

    def check_email(self, email: str) -> None:
        if not email or not is_allowed_email(email, self.allowed_domains):
            raise EmailDomainNotAllowedError()

    async def sign_in(self, claims: IdentityClaims) -> User:
        """Create or update the user behind ``claims``.

        The daily post counter is left alone; the quota gate resets it.

        Raises:
            EmailDomainNotAllowedError: If the email is outside the allowed domains.
            StoreError: If the user record cannot be written.
        """
        self.check_email(claims.email)
        now = self._clock.now()
        try:
            async with self._lock, self._session_factory.begin() as session:
                user = await session.get(User, claims.user_id)
                if user is None:
                    user = User(
                        id=claims.user_id,
                        email=claims.email,
                        display_name=claims.display_name or DEFAULT_DISPLAY_NAME,
                        created_at=now,
                        last_active=now,
                        total_posts=0,
                        daily_post_count=0,
                        last_post_date=day_key(self._clock.today()),
                        is_active=True,
                    )
                    session.add(user)
                    logger.info("Registered new user %s", claims.user_id)
                else:
                    user.email = claims.email
                    if claims.display_name:
                        user.display_name = claims.display_name
                    user.last_active = now
                    user.is_active = True
        except SQLAlchemyError as exc:
            logger.exception("Sign in error for %s", claims.user_id)
            raise StoreError("Failed to sign in. Please try again.") from exc

        await self._track(reads=1, writes=1)
        return user

    async def get_user(self, user_id: str) -> User | None:
        try:
            async with self._session_factory() as session:
                user = await session.get(User, user_id)
        except SQLAlchemyError as exc:
            logger.exception("Error fetching user data for %s", user_id)
            raise StoreError() from exc
        await self._track(reads=1)
        return user

    def is_recently_active(self, user: User) -> bool:
        return self._clock.now() - as_utc(user.last_active) <= self.inactive_after

    async def mark_inactive_users(self) -> int:
        """Flag users whose last activity is older than the inactivity window."""
        cutoff = self._clock.now() - self.inactive_after
        try:
            async with self._session_factory.begin() as session:
                result = await session.execute(
                    update(User)
                    .where(User.is_active.is_(True), User.last_active < cutoff)
                    .values(is_active=False)
                )
        except SQLAlchemyError as exc:
            logger.exception("Error marking inactive users")
            raise StoreError() from exc

        changed = int(result.rowcount or 0)
        await self._track(writes=changed)
        if changed:
            logger.info("Marked %d users inactive", changed)
        return changed

    async def _track(self, *, reads: int = 0, writes: int = 0) -> None:
        if self._meter is None:
            return
        await self._meter.track("read", reads)
        await self._meter.track("write", writes)
