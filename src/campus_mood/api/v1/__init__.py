"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    feed_router,
    posts_router,
    reactions_router,
    stats_router,
    system_router,
    users_router,
)

__all__ = [
    "auth_router",
    "feed_router",
    "posts_router",
    "reactions_router",
    "stats_router",
    "system_router",
    "users_router",
]
