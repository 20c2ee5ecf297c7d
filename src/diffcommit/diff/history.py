"""Linear undo/redo stack of segment snapshots."""

from __future__ import annotations

from collections.abc import Sequence

from diffcommit.diff.segments import DiffSegment


class SegmentHistory:
    """Full-snapshot history for a merge session.

    ``push`` after an ``undo`` discards the redo branch, like an editor.
    """

    def __init__(self) -> None:
        self._snapshots: list[list[DiffSegment]] = []
        self._index = -1

    @property
    def current(self) -> list[DiffSegment]:
        if self._index < 0:
            return []
        return list(self._snapshots[self._index])

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def initialize(self, segments: Sequence[DiffSegment]) -> None:
        self._snapshots = [list(segments)]
        self._index = 0

    def push(self, segments: Sequence[DiffSegment]) -> None:
        del self._snapshots[self._index + 1 :]
        self._snapshots.append(list(segments))
        self._index = len(self._snapshots) - 1

    def undo(self) -> list[DiffSegment]:
        if self.can_undo:
            self._index -= 1
        return self.current

    def redo(self) -> list[DiffSegment]:
        if self.can_redo:
            self._index += 1
        return self.current

    def reset(self) -> None:
        self._snapshots = []
        self._index = -1
