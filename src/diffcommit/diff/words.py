"""Word-level alignment of two text snapshots.

Text is tokenised into words, whitespace runs and single punctuation marks so
that concatenating the tokens always reproduces the input exactly. The token
sequences are aligned with :class:`difflib.SequenceMatcher` (junk heuristics
off) and the opcodes are folded into a flat list of runs.
"""

from __future__ import annotations

import difflib
import re
from dataclasses import dataclass

from diffcommit.diff.segments import SegmentKind

_TOKEN_RE = re.compile(r"\s+|\w+|[^\w\s]")


@dataclass(frozen=True)
class DiffRun:
    kind: SegmentKind
    value: str


def tokenize_words(text: str) -> list[str]:
    return _TOKEN_RE.findall(text)


def _append(runs: list[DiffRun], kind: SegmentKind, tokens: list[str]) -> None:
    if not tokens:
        return
    value = "".join(tokens)
    if runs and runs[-1].kind is kind:
        runs[-1] = DiffRun(kind, runs[-1].value + value)
    else:
        runs.append(DiffRun(kind, value))


def word_runs(source: str, target: str) -> list[DiffRun]:
    """Return unchanged/removed/added runs turning *source* into *target*.

    A replacement yields its removed run before its added run. Two empty
    inputs yield no runs at all.
    """
    a = tokenize_words(source)
    b = tokenize_words(target)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)

    runs: list[DiffRun] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(runs, SegmentKind.UNCHANGED, a[i1:i2])
        elif tag == "delete":
            _append(runs, SegmentKind.REMOVED, a[i1:i2])
        elif tag == "insert":
            _append(runs, SegmentKind.ADDED, b[j1:j2])
        else:  # replace
            _append(runs, SegmentKind.REMOVED, a[i1:i2])
            _append(runs, SegmentKind.ADDED, b[j1:j2])
    return runs
