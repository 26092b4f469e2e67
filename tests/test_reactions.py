# tests/test_reactions.py
from __future__ import annotations

from campus_mood.services.reactions import (
    ReactionAction,
    ReactionBatchEntry,
    apply_entries,
    group_by_post,
)

_seq = iter(range(1, 1000))


def _entry(post_id: str, reaction: str, user_id: str, action: ReactionAction) -> ReactionBatchEntry:
    return ReactionBatchEntry(post_id, reaction, user_id, action, timestamp=0.0, seq=next(_seq))


def test_group_by_post_keeps_enqueue_order() -> None:
    entries = [
        _entry("p1", "semma", "a", ReactionAction.ADD),
        _entry("p2", "semma", "a", ReactionAction.ADD),
        _entry("p1", "semma", "a", ReactionAction.REMOVE),
    ]

    groups = group_by_post(entries)

    assert list(groups) == ["p1", "p2"]
    assert [entry.action for entry in groups["p1"]] == [ReactionAction.ADD, ReactionAction.REMOVE]


def test_remove_of_absent_user_is_a_no_op() -> None:
    result = apply_entries(
        {"semma": {"count": 1, "users": ["a"]}},
        [_entry("p1", "semma", "b", ReactionAction.REMOVE)],
    )

    assert result["semma"] == {"count": 1, "users": ["a"]}


def test_counts_are_recomputed_from_voters() -> None:
    # A drifted count in storage is corrected on the next write.
    result = apply_entries({"gethu": {"count": 7, "users": ["a", "a", "b"]}}, [])

    assert result["gethu"] == {"count": 2, "users": ["a", "b"]}


def test_missing_known_kind_is_created_and_unknown_kind_skipped() -> None:
    result = apply_entries(
        {},
        [
            _entry("p1", "enna_pa_idhu", "a", ReactionAction.ADD),
            _entry("p1", "thumbs_up", "a", ReactionAction.ADD),
        ],
    )

    assert result == {"enna_pa_idhu": {"count": 1, "users": ["a"]}}


def test_input_document_is_not_mutated() -> None:
    original = {"semma": {"count": 0, "users": []}}

    apply_entries(original, [_entry("p1", "semma", "a", ReactionAction.ADD)])

    assert original == {"semma": {"count": 0, "users": []}}
