"""Wiring of the service graph shared by the HTTP layer and background workers."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from campus_mood.core.clock import Clock, SystemClock
from campus_mood.core.settings import Settings, settings
from campus_mood.repositories.post_store import PostStore
from campus_mood.services.daily_stats import DailyAggregator
from campus_mood.services.identity import IdentityService
from campus_mood.services.maintenance import MaintenanceWorker
from campus_mood.services.post_service import PostService
from campus_mood.services.quota_gate import QuotaGate
from campus_mood.services.reaction_batcher import ReactionBatcher
from campus_mood.services.scheduler import AsyncioScheduler, Scheduler
from campus_mood.services.usage_meter import UsageMeter


@dataclass
class ServiceContainer:
    clock: Clock
    meter: UsageMeter
    store: PostStore
    gate: QuotaGate
    aggregator: DailyAggregator
    identity: IdentityService
    posts: PostService
    batcher: ReactionBatcher
    maintenance: MaintenanceWorker

    async def start(self) -> None:
        await self.maintenance.start()

    async def close(self) -> None:
        """Flush pending reactions and stop background work."""
        await self.batcher.close()
        await self.maintenance.stop()


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    clock: Clock | None = None,
    scheduler: Scheduler | None = None,
    config: Settings | None = None,
) -> ServiceContainer:
    """Build every service around one session factory and one clock."""
    config = config or settings
    clock = clock or SystemClock(config.calendar_timezone)

    meter = UsageMeter(
        session_factory,
        clock,
        read_limit=config.daily_read_limit,
        write_limit=config.daily_write_limit,
        warning_threshold=config.usage_warning_threshold,
        critical_threshold=config.usage_critical_threshold,
    )
    store = PostStore(
        session_factory,
        clock,
        meter=meter,
        retention_days=config.post_retention_days,
        page_size=config.posts_per_page,
    )
    gate = QuotaGate(session_factory, clock, daily_limit=config.daily_post_limit, meter=meter)
    aggregator = DailyAggregator(session_factory, clock, store=store, meter=meter)
    identity = IdentityService(
        session_factory,
        clock,
        allowed_domains=config.allowed_email_domains,
        inactive_days=config.inactive_days_limit,
        meter=meter,
    )
    posts = PostService(store, gate, aggregator, clock, max_text_length=config.max_text_length)
    batcher = ReactionBatcher(
        store,
        scheduler or AsyncioScheduler(),
        interval=config.reaction_batch_interval_seconds,
        clock=clock,
    )
    maintenance = MaintenanceWorker(
        store,
        aggregator,
        identity,
        clock,
        interval=config.cleanup_interval_seconds,
        batch_size=config.cleanup_batch_size,
    )
    return ServiceContainer(
        clock=clock,
        meter=meter,
        store=store,
        gate=gate,
        aggregator=aggregator,
        identity=identity,
        posts=posts,
        batcher=batcher,
        maintenance=maintenance,
    )
