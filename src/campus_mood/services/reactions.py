"""Reaction batch entries and the voter-set arithmetic applied at flush time."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from campus_mood.core.vocabulary import REACTION_IDS


class ReactionAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class ReactionBatchEntry:
    """One queued reaction toggle. Lives only in the batcher's memory."""

    post_id: str
    reaction: str
    user_id: str
    action: ReactionAction
    timestamp: float
    # Logical order assigned by the batcher; later entries win.
    seq: int


def group_by_post(
    entries: Iterable[ReactionBatchEntry],
) -> dict[str, list[ReactionBatchEntry]]:
    """Group entries per post, keeping enqueue order inside each group."""
    groups: dict[str, list[ReactionBatchEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.post_id, []).append(entry)
    return groups


def apply_entries(
    reactions: Mapping[str, Mapping[str, Any]] | None,
    entries: Iterable[ReactionBatchEntry],
) -> dict[str, dict[str, Any]]:
    """Return a new reaction document with ``entries`` applied in order.

    Add inserts the user if absent and remove erases it if present, so both are
    idempotent and repeated toggles from one user settle on the parity of the
    sequence. Counts are recomputed from the voter lists.
    """
    updated: dict[str, dict[str, Any]] = {}
    for reaction_id, data in (reactions or {}).items():
        users = list(dict.fromkeys(data.get("users", [])))
        updated[reaction_id] = {"count": len(users), "users": users}

    for entry in entries:
        data = updated.get(entry.reaction)
        if data is None:
            if entry.reaction not in REACTION_IDS:
                continue
            data = updated[entry.reaction] = {"count": 0, "users": []}

        users = data["users"]
        if entry.action is ReactionAction.ADD:
            if entry.user_id not in users:
                users.append(entry.user_id)
        elif entry.user_id in users:
            users.remove(entry.user_id)
        data["count"] = len(users)

    return updated
