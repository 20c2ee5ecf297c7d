"""Diff segment model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SegmentKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class DiffSegment:
    """A run of text from a snapshot comparison.

    Attributes:
        id: Unique within one diff result (``seg-N``).
        value: The text of the run.
        kind: Added, removed or unchanged relative to the source snapshot.
        is_included: Whether the run contributes to the materialised text.
        group_id: Shared by a removed/added substitution pair (``group-N``).
    """

    id: str
    value: str
    kind: SegmentKind
    is_included: bool
    group_id: str | None = None
