"""Interactive diff/merge: toggleable segments between two snapshots.

All functions are pure. Segment lists are never mutated in place; every
operation returns a new list, so callers can keep old lists as undo snapshots.

Invariant: for every ``group_id`` present, exactly one member is included.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from diffcommit.diff.segments import DiffSegment, SegmentKind
from diffcommit.diff.words import DiffRun, word_runs

_SUBSTITUTION_PAIRS = {
    (SegmentKind.REMOVED, SegmentKind.ADDED),
    (SegmentKind.ADDED, SegmentKind.REMOVED),
}


def build_segments(runs: Iterable[DiffRun | tuple[SegmentKind, str]]) -> list[DiffSegment]:
    """Turn an alignment run list into segments.

    First pass: ids, kinds and the "accept the new version" default
    (added and unchanged included, removed excluded).
    Second pass: each adjacent removed/added pair, in either order, shares a
    group id. Pairs are consumed two at a time, never three.
    """
    segments: list[DiffSegment] = []
    for index, run in enumerate(runs):
        kind, value = (run.kind, run.value) if isinstance(run, DiffRun) else run
        kind = SegmentKind(kind)
        segments.append(
            DiffSegment(
                id=f"seg-{index}",
                value=value,
                kind=kind,
                is_included=kind is not SegmentKind.REMOVED,
            )
        )

    group_counter = 0
    i = 0
    while i < len(segments) - 1:
        current, following = segments[i], segments[i + 1]
        if (current.kind, following.kind) in _SUBSTITUTION_PAIRS:
            group_id = f"group-{group_counter}"
            group_counter += 1
            segments[i] = replace(current, group_id=group_id)
            segments[i + 1] = replace(following, group_id=group_id)
            i += 2
        else:
            i += 1
    return segments


def diff(source: str, target: str) -> list[DiffSegment]:
    """Compare two snapshots word by word."""
    return build_segments(word_runs(source, target))


def toggle(segments: Sequence[DiffSegment], segment_id: str) -> list[DiffSegment]:
    """Flip one segment; other members of its group take the opposite state.

    An unknown id returns an unchanged copy.
    """
    target = next((s for s in segments if s.id == segment_id), None)
    if target is None:
        return list(segments)

    new_state = not target.is_included
    result: list[DiffSegment] = []
    for segment in segments:
        if segment.id == segment_id:
            result.append(replace(segment, is_included=new_state))
        elif target.group_id is not None and segment.group_id == target.group_id:
            result.append(replace(segment, is_included=not new_state))
        else:
            result.append(segment)
    return result


def _set_all(segments: Sequence[DiffSegment], accept: bool) -> list[DiffSegment]:
    result: list[DiffSegment] = []
    for segment in segments:
        if segment.kind is SegmentKind.ADDED:
            result.append(replace(segment, is_included=accept))
        elif segment.kind is SegmentKind.REMOVED:
            result.append(replace(segment, is_included=not accept))
        else:
            result.append(segment)
    return result


def accept_all(segments: Sequence[DiffSegment]) -> list[DiffSegment]:
    """Include every addition and drop every removal (yields the target text)."""
    return _set_all(segments, accept=True)


def reject_all(segments: Sequence[DiffSegment]) -> list[DiffSegment]:
    """Drop every addition and keep every removal (yields the source text)."""
    return _set_all(segments, accept=False)


def materialize(segments: Iterable[DiffSegment]) -> str:
    return "".join(s.value for s in segments if s.is_included)


def groups(segments: Iterable[DiffSegment]) -> dict[str, list[DiffSegment]]:
    """Segments keyed by group id, in sequence order; ungrouped segments omitted."""
    grouped: dict[str, list[DiffSegment]] = {}
    for segment in segments:
        if segment.group_id is not None:
            grouped.setdefault(segment.group_id, []).append(segment)
    return grouped


def change_counts(segments: Iterable[DiffSegment]) -> dict[SegmentKind, int]:
    counts = {kind: 0 for kind in SegmentKind}
    for segment in segments:
        counts[segment.kind] += 1
    return counts
