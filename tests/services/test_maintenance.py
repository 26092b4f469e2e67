# tests/services/test_maintenance.py
from __future__ import annotations

import asyncio

import pytest

from campus_mood.core.errors import StoreError


@pytest.mark.asyncio
async def test_run_once_sweeps_expired_posts_in_batches(services, clock) -> None:
    services.maintenance.batch_size = 2
    for index in range(5):
        await services.posts.submit(f"u{index}", "sleepy_da", "")
    clock.advance(days=8)
    fresh = await services.posts.submit("u9", "semma_mood", "")

    report = await services.maintenance.run_once()

    assert report.expired_posts == 5
    page = await services.store.load_posts()
    assert [post.id for post in page.posts] == [fresh.id]


@pytest.mark.asyncio
async def test_run_once_refreshes_todays_active_users(services) -> None:
    await services.posts.submit("u1", "sleepy_da", "")
    await services.posts.submit("u2", "sleepy_da", "")

    report = await services.maintenance.run_once()

    assert report.active_users == 2


@pytest.mark.asyncio
async def test_stats_outlive_swept_posts(services, clock) -> None:
    await services.posts.submit("u1", "bus_miss_aachu", "")
    clock.advance(days=8)

    await services.maintenance.run_once()

    stats = await services.aggregator.get_daily_stats("2026-03-10")
    assert stats is not None
    assert stats.total_posts == 1


@pytest.mark.asyncio
async def test_worker_loop_survives_store_errors_and_stops(services, mocker) -> None:
    worker = services.maintenance
    worker.interval = 0.01
    run_once = mocker.patch.object(worker, "run_once", side_effect=StoreError("down"))

    await worker.start()
    # Loop waits at least 0.1s between cycles.
    await asyncio.sleep(0.35)
    assert worker.running

    await worker.stop()

    assert not worker.running
    assert run_once.await_count >= 2
