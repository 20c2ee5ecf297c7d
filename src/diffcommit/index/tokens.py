"""Text normalisation helpers shared by the chunker and the index."""

from __future__ import annotations

import hashlib
import math
import re

_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(text: str) -> str:
    """Lower-case and collapse whitespace runs to single spaces."""
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def tokenize(text: str) -> list[str]:
    """ASCII alphanumeric runs of *text*, lower-cased, single characters dropped."""
    return [t for t in _NON_ALNUM_RE.split(normalize_text(text)) if len(t) > 1]


def keywords(text: str, limit: int) -> list[str]:
    """First *limit* distinct tokens of *text*, in order of appearance."""
    return list(dict.fromkeys(tokenize(text)))[:limit]


def estimate_tokens(text: str) -> int:
    """Approximate token count: 4 characters ≈ 1 token, rounded up."""
    return math.ceil(len(text) / 4)


def content_hash(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()
