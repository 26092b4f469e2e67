# tests/services/test_daily_stats.py
from __future__ import annotations

import pytest

from campus_mood.services.daily_stats import DailyAggregator, top_mood


@pytest.fixture()
def aggregator(session_factory, clock, meter, store) -> DailyAggregator:
    return DailyAggregator(session_factory, clock, store=store, meter=meter)


def test_top_mood_prefers_highest_count() -> None:
    assert top_mood({"semma_mood": 1, "sleepy_da": 3}) == "sleepy_da"


def test_top_mood_ties_break_to_smallest_mood_id() -> None:
    assert top_mood({"sleepy_da": 2, "chill_panren": 2, "semma_mood": 1}) == "chill_panren"


def test_top_mood_rejects_empty_breakdown() -> None:
    with pytest.raises(ValueError):
        top_mood({})


@pytest.mark.asyncio
async def test_first_post_creates_the_days_record(aggregator) -> None:
    stats = await aggregator.record_post("semma_mood", True, first_post_of_user=True)

    assert stats.date == "2026-03-10"
    assert stats.total_posts == 1
    assert stats.mood_breakdown == {"semma_mood": 1}
    assert stats.challenge_posts == 1
    assert stats.active_users == 1
    assert stats.top_mood == "semma_mood"


@pytest.mark.asyncio
async def test_posts_accumulate_into_breakdown_and_top_mood(aggregator) -> None:
    await aggregator.record_post("full_tension_da", False)
    await aggregator.record_post("full_tension_da", False)
    await aggregator.record_post("bus_miss_aachu", False)

    stats = await aggregator.get_daily_stats("2026-03-10")

    assert stats is not None
    assert stats.total_posts == 3
    assert stats.mood_breakdown == {"full_tension_da": 2, "bus_miss_aachu": 1}
    assert stats.top_mood == "full_tension_da"
    assert stats.challenge_posts == 0


@pytest.mark.asyncio
async def test_missing_day_means_no_data(aggregator) -> None:
    assert await aggregator.get_daily_stats("2026-03-01") is None


@pytest.mark.asyncio
async def test_recent_stats_are_newest_first_and_skip_empty_days(aggregator, clock) -> None:
    await aggregator.record_post("sleepy_da", False)
    clock.advance(days=2)
    await aggregator.record_post("semma_mood", False)
    clock.advance(days=1)
    await aggregator.record_post("chill_panren", False)

    recent = await aggregator.get_recent_stats(7)

    assert [stats.date for stats in recent] == ["2026-03-13", "2026-03-12", "2026-03-10"]
    assert [stats.date for stats in await aggregator.get_recent_stats(2)] == ["2026-03-13", "2026-03-12"]


@pytest.mark.asyncio
async def test_summary_ranks_moods_across_days(aggregator, clock) -> None:
    await aggregator.record_post("sleepy_da", False, first_post_of_user=True)
    await aggregator.record_post("sleepy_da", False)
    clock.advance(days=1)
    await aggregator.record_post("semma_mood", False, first_post_of_user=True)
    await aggregator.record_post("sleepy_da", False, first_post_of_user=True)

    summary = await aggregator.get_summary(30)

    assert summary.total_posts == 4
    assert summary.average_daily_posts == 2.0
    assert summary.total_users == 2
    assert [(entry.mood, entry.count) for entry in summary.top_moods] == [
        ("sleepy_da", 3),
        ("semma_mood", 1),
    ]


@pytest.mark.asyncio
async def test_refresh_active_users_counts_distinct_authors(aggregator, store) -> None:
    for author in ("a", "a", "b", "c"):
        await store.create_post(author_id=author, mood="mokka_feeling", text="")
        await aggregator.record_post("mokka_feeling", False)

    assert await aggregator.refresh_active_users("2026-03-10") == 3
    stats = await aggregator.get_daily_stats("2026-03-10")
    assert stats.active_users == 3


@pytest.mark.asyncio
async def test_refresh_without_record_changes_nothing(aggregator) -> None:
    assert await aggregator.refresh_active_users("2026-03-10") is None
