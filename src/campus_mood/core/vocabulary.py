"""Closed vocabularies known at build time: moods, reactions and daily challenges."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Final


@dataclass(frozen=True)
class MoodOption:
    id: str
    label: str
    description: str


@dataclass(frozen=True)
class ReactionOption:
    id: str
    label: str
    emoji: str


MOOD_OPTIONS: Final[tuple[MoodOption, ...]] = (
    MoodOption("full_tension_da", "Full tension da", "stressed/anxious"),
    MoodOption("chill_panren", "Chill panren", "relaxing/happy"),
    MoodOption("family_drama_running", "Family drama running", "family issues"),
    MoodOption("crush_a_pathen", "Crush-a pathen", "romantic excitement"),
    MoodOption("canteen_la_queue", "Canteen-la queue", "waiting/bored"),
    MoodOption("bus_miss_aachu", "Bus miss aachu", "frustrated/late"),
    MoodOption("professor_vera_level", "Professor vera level", "academic stress"),
    MoodOption("semma_mood", "Semma mood", "excellent mood"),
    MoodOption("mokka_feeling", "Mokka feeling", "disappointed/upset"),
    MoodOption("sleepy_da", "Sleepy da", "tired"),
)

REACTION_OPTIONS: Final[tuple[ReactionOption, ...]] = (
    ReactionOption("semma", "Semma!", "🔥"),
    ReactionOption("same_pinch", "Same pinch!", "🤝"),
    ReactionOption("mokka_da", "Mokka da", "😒"),
    ReactionOption("tension_vendam_da", "Tension vendam da", "🤗"),
    ReactionOption("gethu", "Gethu!", "😎"),
    ReactionOption("enna_pa_idhu", "Enna pa idhu?", "🤔"),
)

MOOD_IDS: Final[frozenset[str]] = frozenset(option.id for option in MOOD_OPTIONS)
REACTION_IDS: Final[tuple[str, ...]] = tuple(option.id for option in REACTION_OPTIONS)

DAILY_CHALLENGES: Final[tuple[str, ...]] = (
    "Describe your morning in Tamil slang",
    "What's your canteen mood today?",
    "How are you handling today's lectures?",
    "Share your bus/auto experience",
    "What's your weekend plan da?",
    "Describe your hostel life in one mood",
    "How's your project submission going?",
    "What's your go-to stress buster?",
    "Share your favorite campus spot",
    "How do you feel about exams coming up?",
    "What's your current crush status?",
    "Describe your family drama in one word",
    "How's the weather affecting your mood?",
    "What's your favorite college memory?",
    "How do you feel about group studies?",
    "Describe your last-minute assignment panic",
    "What's your canteen order today?",
    "How do you feel about online classes?",
    "Share your funniest campus moment",
    "What's your go-to relaxation method?",
    "What's your favorite snack during study sessions?",
)


def is_mood(value: str) -> bool:
    return value in MOOD_IDS


def is_reaction(value: str) -> bool:
    return value in REACTION_IDS


def daily_challenge(day: date) -> tuple[int, str]:
    """Return ``(index, prompt)`` of the challenge for a calendar day.

    Challenges rotate by day of year, so everyone on campus sees the same
    prompt on the same date.
    """
    index = day.timetuple().tm_yday % len(DAILY_CHALLENGES)
    return index, DAILY_CHALLENGES[index]


def empty_reactions() -> dict[str, dict[str, object]]:
    """Return the reaction document a freshly created post starts with."""
    return {reaction_id: {"count": 0, "users": []} for reaction_id in REACTION_IDS}
