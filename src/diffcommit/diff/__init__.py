"""Word-level diff/merge with toggleable substitution groups."""

from diffcommit.diff.history import SegmentHistory
from diffcommit.diff.merger import accept_all, diff, materialize, reject_all, toggle
from diffcommit.diff.segments import DiffSegment, SegmentKind

__all__ = [
    "DiffSegment",
    "SegmentHistory",
    "SegmentKind",
    "accept_all",
    "diff",
    "materialize",
    "reject_all",
    "toggle",
]
