"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .feed import router as feed_router
from .posts import router as posts_router
from .reactions import router as reactions_router
from .stats import router as stats_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "feed_router",
    "posts_router",
    "reactions_router",
    "stats_router",
    "system_router",
    "users_router",
]
