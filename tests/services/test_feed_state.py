# tests/services/test_feed_state.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest

from campus_mood.core.errors import ReactionValidationError
from campus_mood.models import Post
from campus_mood.services.feed_state import FeedState, PostView, ReactionView
from campus_mood.services.reaction_batcher import ReactionBatcher


@pytest.fixture()
def batcher(store, scheduler, clock) -> ReactionBatcher:
    return ReactionBatcher(store, scheduler, interval=30.0, clock=clock)


@pytest.fixture()
async def feed(store, batcher) -> FeedState:
    await store.create_post(author_id="author", mood="canteen_la_queue", text="20 min queue")
    page = await store.load_posts()
    state = FeedState("viewer", batcher)
    state.reconcile(page.posts, batcher.committed_seq)
    return state


def test_view_hides_author_and_flags_viewer_reactions() -> None:
    post = Post(
        id="p1",
        author_id="secret-author",
        mood="semma_mood",
        text="",
        is_challenge=False,
        challenge_id=None,
        created_at=datetime(2026, 3, 10, tzinfo=UTC),
        reactions={"semma": {"count": 2, "users": ["viewer", "other"]}},
    )

    view = PostView.from_post(post, "viewer")

    assert not hasattr(view, "author_id")
    assert view.reactions["semma"] == ReactionView(count=2, user_reacted=True)
    assert view.reactions["gethu"] == ReactionView(count=0, user_reacted=False)


@pytest.mark.asyncio
async def test_toggle_updates_view_and_queues_entry(feed, batcher) -> None:
    post_id = feed.posts[0].id

    entry = feed.toggle(post_id, "semma")

    assert entry is not None
    assert entry.action.value == "add"
    assert feed.posts[0].reactions["semma"] == ReactionView(count=1, user_reacted=True)
    assert batcher.pending == 1

    feed.toggle(post_id, "semma")

    assert feed.posts[0].reactions["semma"] == ReactionView(count=0, user_reacted=False)
    assert batcher.pending == 2


@pytest.mark.asyncio
async def test_toggle_on_unknown_post_does_nothing(feed, batcher) -> None:
    assert feed.toggle("missing", "semma") is None
    assert batcher.pending == 0


@pytest.mark.asyncio
async def test_invalid_reaction_leaves_view_untouched(feed) -> None:
    before = dict(feed.posts[0].reactions)

    with pytest.raises(ReactionValidationError):
        feed.toggle(feed.posts[0].id, "like")

    assert feed.posts[0].reactions == before
    assert feed.pending_toggles == 0


@pytest.mark.asyncio
async def test_stale_snapshot_keeps_optimistic_toggle(feed, store, batcher) -> None:
    post_id = feed.posts[0].id
    feed.toggle(post_id, "gethu")

    # Snapshot taken before the flush: the store has not seen the toggle yet.
    stale = await store.load_posts()
    feed.reconcile(stale.posts, batcher.committed_seq)

    assert feed.posts[0].reactions["gethu"] == ReactionView(count=1, user_reacted=True)
    assert feed.pending_toggles == 1


@pytest.mark.asyncio
async def test_committed_snapshot_supersedes_toggle(feed, store, batcher) -> None:
    post_id = feed.posts[0].id
    feed.toggle(post_id, "gethu")
    await batcher.flush_now()

    fresh = await store.load_posts()
    feed.reconcile(fresh.posts, batcher.committed_seq)

    assert feed.pending_toggles == 0
    assert feed.posts[0].reactions["gethu"] == ReactionView(count=1, user_reacted=True)


@pytest.mark.asyncio
async def test_toggle_after_flush_is_reapplied_over_snapshot(feed, store, batcher) -> None:
    post_id = feed.posts[0].id
    feed.toggle(post_id, "gethu")
    await batcher.flush_now()
    feed.toggle(post_id, "gethu")

    snapshot = await store.load_posts()
    feed.reconcile(snapshot.posts, batcher.committed_seq)

    assert feed.posts[0].reactions["gethu"] == ReactionView(count=0, user_reacted=False)
    assert feed.pending_toggles == 1


@pytest.mark.asyncio
async def test_append_skips_posts_already_shown(feed, store, clock) -> None:
    clock.advance(minutes=1)
    await store.create_post(author_id="author", mood="sleepy_da", text="")
    page = await store.load_posts()

    feed.append(page.posts)

    assert len(feed.posts) == 2
    assert len({view.id for view in feed.posts}) == 2
