# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from campus_mood.core.security import create_access_token
from campus_mood.core.settings import settings
from campus_mood.db.session import build_session_factory, create_tables
from campus_mood.main import app as fastapi_app
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.container import ServiceContainer, build_services
from campus_mood.services.usage_meter import UsageMeter

TEST_DB_URL = "sqlite+aiosqlite://"
START = datetime(2026, 3, 10, 9, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced clock; "today" is the UTC calendar date."""

    def __init__(self, now: datetime = START) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def start_of_day(self, day: date) -> datetime:
        return datetime.combine(day, time.min, tzinfo=UTC)

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@dataclass
class FakeTimer:
    due: float
    callback: Callable[[], Awaitable[None]]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Scheduler whose timers only fire when a test advances it."""

    time: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], Awaitable[None]]) -> FakeTimer:
        timer = FakeTimer(due=self.time + delay, callback=callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled and not timer.fired]

    async def advance(self, seconds: float) -> None:
        self.time += seconds
        while True:
            due = sorted(
                (timer for timer in self.pending if timer.due <= self.time),
                key=lambda timer: timer.due,
            )
            if not due:
                return
            for timer in due:
                timer.fired = True
                await timer.callback()


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def meter(session_factory: async_sessionmaker[AsyncSession], clock: FakeClock) -> UsageMeter:
    return UsageMeter(session_factory, clock)


@pytest.fixture()
def store(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FakeClock,
    meter: UsageMeter,
) -> PostStore:
    return PostStore(session_factory, clock, meter=meter)


@pytest.fixture()
def services(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FakeClock,
    scheduler: FakeScheduler,
) -> ServiceContainer:
    return build_services(session_factory, clock=clock, scheduler=scheduler, config=settings)


@pytest.fixture()
async def client(services: ServiceContainer) -> AsyncIterator[AsyncClient]:
    fastapi_app.state.services = services
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client


def make_auth_headers(user_id: str = "student-1", email: str = "student1@campus.edu") -> dict[str, str]:
    token = create_access_token(user_id, email, "Student")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Return a factory for Authorization headers carrying an identity token."""
    return make_auth_headers
