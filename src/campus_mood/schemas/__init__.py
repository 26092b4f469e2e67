# src/campus_mood/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import PostCreate, PostPageResponse, PostResponse, ReactionRequest
from .stats import DailyStatsResponse, StatsSummaryResponse, UsageResponse
from .system import VocabularyResponse
from .user import DailyLimitResponse, UserResponse

__all__ = [
    "PostCreate", "PostPageResponse", "PostResponse", "ReactionRequest",
    "DailyStatsResponse", "StatsSummaryResponse", "UsageResponse",
    "VocabularyResponse",
    "DailyLimitResponse", "UserResponse",
]
