# tests/v1/test_posts_api.py
from __future__ import annotations

import pytest

from campus_mood.core.errors import StoreError


@pytest.mark.asyncio
async def test_requires_identity_token(client) -> None:
    response = await client.get("/api/v1/posts/")
    assert response.status_code in {401, 403}


@pytest.mark.asyncio
async def test_invalid_token_is_unauthorized(client) -> None:
    response = await client.get("/api/v1/posts/", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_post_hides_author(client, auth_headers) -> None:
    response = await client.post(
        "/api/v1/posts/",
        json={"mood": "canteen_la_queue", "text": "biryani over already"},
        headers=auth_headers(),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["mood"] == "canteen_la_queue"
    assert body["text"] == "biryani over already"
    assert "author_id" not in body
    assert body["reactions"]["semma"] == {"count": 0, "user_reacted": False}


@pytest.mark.asyncio
async def test_create_post_rejects_unknown_mood(client, auth_headers) -> None:
    response = await client.post("/api/v1/posts/", json={"mood": "ecstatic"}, headers=auth_headers())

    assert response.status_code == 400
    assert "Unknown mood" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_post_rejects_long_text(client, auth_headers) -> None:
    response = await client.post(
        "/api/v1/posts/",
        json={"mood": "semma_mood", "text": "a" * 101},
        headers=auth_headers(),
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_daily_limit_returns_429(client, auth_headers) -> None:
    headers = auth_headers()
    for _ in range(10):
        response = await client.post("/api/v1/posts/", json={"mood": "sleepy_da"}, headers=headers)
        assert response.status_code == 201

    response = await client.post("/api/v1/posts/", json={"mood": "sleepy_da"}, headers=headers)

    assert response.status_code == 429
    assert response.json()["detail"] == "Daily post limit reached. Try again tomorrow!"


@pytest.mark.asyncio
async def test_store_failure_returns_503(client, services, auth_headers, mocker) -> None:
    mocker.patch.object(
        services.store,
        "create_post",
        side_effect=StoreError("Failed to create post. Please try again."),
    )

    response = await client.post("/api/v1/posts/", json={"mood": "semma_mood"}, headers=auth_headers())

    assert response.status_code == 503
    assert response.json()["detail"] == "Failed to create post. Please try again."


@pytest.mark.asyncio
async def test_list_posts_paginates_with_cursor(client, services, clock, auth_headers) -> None:
    for index in range(25):
        await services.store.create_post(author_id=f"a{index}", mood="semma_mood", text=str(index))
        clock.advance(seconds=1)

    first = await client.get("/api/v1/posts/", headers=auth_headers())
    body = first.json()

    assert len(body["posts"]) == 20
    assert body["has_more"]
    assert body["posts"][0]["text"] == "24"

    second = await client.get(
        "/api/v1/posts/",
        params={"cursor": body["next_cursor"]},
        headers=auth_headers(),
    )
    body = second.json()

    assert [post["text"] for post in body["posts"]] == ["4", "3", "2", "1", "0"]
    assert not body["has_more"]
    assert body["next_cursor"] is None


@pytest.mark.asyncio
async def test_list_posts_rejects_bad_cursor(client, auth_headers) -> None:
    response = await client.get("/api/v1/posts/", params={"cursor": "garbage"}, headers=auth_headers())
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reactions_are_queued_then_visible_after_flush(client, services, auth_headers) -> None:
    post = await services.store.create_post(author_id="author", mood="semma_mood", text="")
    headers = auth_headers("viewer", "viewer@campus.edu")

    response = await client.post(
        f"/api/v1/posts/{post.id}/reactions",
        json={"reaction": "same_pinch", "action": "add"},
        headers=headers,
    )

    assert response.status_code == 202
    assert response.json()["pending"] == 1

    flushed = await client.post("/api/v1/reactions/flush", headers=headers)
    assert flushed.json()["success"]
    assert flushed.json()["pending"] == 0

    response = await client.get(f"/api/v1/posts/{post.id}", headers=headers)
    assert response.json()["reactions"]["same_pinch"] == {"count": 1, "user_reacted": True}

    other = await client.get(f"/api/v1/posts/{post.id}", headers=auth_headers("someone-else"))
    assert other.json()["reactions"]["same_pinch"] == {"count": 1, "user_reacted": False}


@pytest.mark.asyncio
async def test_unknown_reaction_returns_400(client, services, auth_headers) -> None:
    post = await services.store.create_post(author_id="author", mood="semma_mood", text="")

    response = await client.post(
        f"/api/v1/posts/{post.id}/reactions",
        json={"reaction": "heart"},
        headers=auth_headers(),
    )

    assert response.status_code == 400
    assert services.batcher.pending == 0


@pytest.mark.asyncio
async def test_missing_post_returns_404(client, auth_headers) -> None:
    response = await client.get("/api/v1/posts/nope", headers=auth_headers())
    assert response.status_code == 404
