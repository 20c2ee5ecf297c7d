"""Tests for toggleable diff segments."""

from __future__ import annotations

from diffcommit.diff.merger import (
    accept_all,
    build_segments,
    change_counts,
    diff,
    groups,
    materialize,
    reject_all,
    toggle,
)
from diffcommit.diff.segments import DiffSegment, SegmentKind

A, R, U = SegmentKind.ADDED, SegmentKind.REMOVED, SegmentKind.UNCHANGED


def _assert_groups_exclusive(segments: list[DiffSegment]) -> None:
    for members in groups(segments).values():
        assert sum(s.is_included for s in members) == 1


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def test_substitution_segments() -> None:
    segments = diff("the quick fox", "the slow fox")
    assert segments == [
        DiffSegment("seg-0", "the ", U, True),
        DiffSegment("seg-1", "quick", R, False, "group-0"),
        DiffSegment("seg-2", "slow", A, True, "group-0"),
        DiffSegment("seg-3", " fox", U, True),
    ]


def test_default_materialises_target() -> None:
    source, target = "One fish, two fish.", "One cat, three fish!"
    assert materialize(diff(source, target)) == target


def test_identical_texts() -> None:
    segments = diff("unchanged", "unchanged")
    assert [(s.kind, s.value) for s in segments] == [(U, "unchanged")]
    assert groups(segments) == {}


def test_empty_texts() -> None:
    assert diff("", "") == []
    assert materialize([]) == ""


def test_pairs_in_either_order() -> None:
    segments = build_segments([(A, "new"), (R, "old"), (U, " "), (R, "x"), (A, "y")])
    assert [s.group_id for s in segments] == ["group-0", "group-0", None, "group-1", "group-1"]


def test_pairs_consumed_two_at_a_time() -> None:
    segments = build_segments([(R, "a"), (A, "b"), (R, "c")])
    assert [s.group_id for s in segments] == ["group-0", "group-0", None]


def test_segment_ids_are_unique() -> None:
    segments = diff("a b c d e", "a x c y e f")
    ids = [s.id for s in segments]
    assert len(ids) == len(set(ids))


def test_build_accepts_string_kinds() -> None:
    segments = build_segments([("unchanged", "a"), ("removed", "b")])
    assert segments[1].kind is R
    assert segments[1].is_included is False


# ---------------------------------------------------------------------------
# Toggling
# ---------------------------------------------------------------------------


def test_toggle_group_member_flips_partner() -> None:
    segments = diff("the quick fox", "the slow fox")
    toggled = toggle(segments, "seg-1")
    assert toggled[1].is_included is True
    assert toggled[2].is_included is False
    assert materialize(toggled) == "the quick fox"
    _assert_groups_exclusive(toggled)


def test_toggle_twice_restores_state() -> None:
    segments = diff("the quick fox", "the slow fox")
    assert toggle(toggle(segments, "seg-2"), "seg-2") == segments


def test_toggle_does_not_mutate_input() -> None:
    segments = diff("a b", "a c")
    snapshot = list(segments)
    toggle(segments, segments[-1].id)
    assert segments == snapshot


def test_toggle_ungrouped_segment_only_changes_itself() -> None:
    segments = diff("Hello", "Hello world")
    toggled = toggle(segments, "seg-1")
    assert [s.is_included for s in toggled] == [True, False]
    assert materialize(toggled) == "Hello"


def test_toggle_unchanged_segment_excludes_it() -> None:
    segments = diff("keep", "keep")
    assert materialize(toggle(segments, "seg-0")) == ""


def test_toggle_unknown_id_returns_equal_copy() -> None:
    segments = diff("a", "b")
    result = toggle(segments, "seg-99")
    assert result == segments
    assert result is not segments


def test_groups_stay_exclusive_under_any_toggle_sequence() -> None:
    segments = diff("alpha beta gamma delta", "alpha BETA gamma DELTA epsilon")
    for segment_id in ["seg-1", "seg-2", "seg-2", "seg-5", "seg-1", "seg-6"]:
        segments = toggle(segments, segment_id)
        _assert_groups_exclusive(segments)


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------


def test_accept_and_reject_all_round_trip() -> None:
    source = "The cat sat on the mat."
    target = "A dog sat on a rug!"
    segments = diff(source, target)
    assert materialize(reject_all(segments)) == source
    assert materialize(accept_all(segments)) == target
    assert materialize(accept_all(reject_all(segments))) == target


def test_bulk_operations_keep_groups_exclusive() -> None:
    segments = diff("one two three", "one 2 three four")
    _assert_groups_exclusive(accept_all(segments))
    _assert_groups_exclusive(reject_all(segments))


def test_bulk_operations_leave_unchanged_alone() -> None:
    segments = toggle(diff("keep this", "keep that"), "seg-0")
    assert reject_all(segments)[0].is_included is False


def test_rediff_of_result_is_idempotent() -> None:
    source, target = "first draft text", "second draft words"
    merged = materialize(toggle(diff(source, target), "seg-1"))
    again = diff(merged, merged)
    assert [s.kind for s in again] == [U]
    assert materialize(again) == merged


def test_change_counts() -> None:
    counts = change_counts(diff("the quick fox", "the slow fox"))
    assert counts == {A: 1, R: 1, U: 2}
