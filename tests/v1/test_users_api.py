# tests/v1/test_users_api.py
from __future__ import annotations

import pytest

from campus_mood.core.settings import settings
from campus_mood.main import app
from campus_mood.services.container import build_services


@pytest.mark.asyncio
async def test_sign_in_then_profile(client, auth_headers) -> None:
    headers = auth_headers("uid-7", "kavya@campus.edu")

    signed_in = await client.post("/api/v1/auth/sign-in", headers=headers)

    assert signed_in.status_code == 200
    assert signed_in.json()["display_name"] == "Student"
    assert signed_in.json()["posts_today"] == 0

    await client.post("/api/v1/posts/", json={"mood": "semma_mood"}, headers=headers)
    profile = await client.get("/api/v1/users/me", headers=headers)

    assert profile.json()["total_posts"] == 1
    assert profile.json()["posts_today"] == 1


@pytest.mark.asyncio
async def test_profile_of_unknown_user_is_404(client, auth_headers) -> None:
    response = await client.get("/api/v1/users/me", headers=auth_headers("never-signed-in"))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_daily_limit_endpoint(client, auth_headers) -> None:
    headers = auth_headers()
    for _ in range(3):
        await client.post("/api/v1/posts/", json={"mood": "sleepy_da"}, headers=headers)

    response = await client.get("/api/v1/users/me/daily-limit", headers=headers)

    assert response.json() == {"can_post": True, "remaining": 7, "limit": 10}


@pytest.mark.asyncio
async def test_outside_domain_is_forbidden(client, session_factory, clock, scheduler, auth_headers) -> None:
    config = settings.model_copy(update={"allowed_email_domains": ["campus.edu"]})
    app.state.services = build_services(
        session_factory, clock=clock, scheduler=scheduler, config=config
    )

    response = await client.post("/api/v1/auth/sign-in", headers=auth_headers("x", "x@gmail.com"))

    assert response.status_code == 403
    assert response.json()["detail"] == "Please use your college email address to sign in"
