# src/campus_mood/services/__init__.py
"""Business logic services for the Campus Mood application."""

from .reactions import ReactionAction, ReactionBatchEntry
from .scheduler import AsyncioScheduler
from .usage_meter import UsageLevel, UsageMeter, UsageReport

__all__ = [
    "AsyncioScheduler",
    "ReactionAction",
    "ReactionBatchEntry",
    "UsageLevel",
    "UsageMeter",
    "UsageReport",
]
