"""Draft chunker: soft-boundary splitting under a maximum chunk size."""

from __future__ import annotations

from diffcommit.index.models import Chunk
from diffcommit.index.tokens import estimate_tokens, keywords


class DraftChunker:
    """Split a project draft into bounded chunks.

    A chunk ends at ``max_chars`` past its start, or earlier at the last
    newline inside that window when the newline lies more than
    ``min_break_chars`` past the start (avoids mid-paragraph cuts without
    producing tiny chunks). Chunk text is stripped; offsets are not.

    A blank draft yields a single empty chunk so every source is
    represented in the index.
    """

    def __init__(
        self,
        max_chars: int = 1200,
        min_break_chars: int = 200,
        max_keywords: int = 24,
    ) -> None:
        if max_chars < 1:
            raise ValueError("max_chars must be >= 1")
        if min_break_chars < 0:
            raise ValueError("min_break_chars must be >= 0")
        self.max_chars = max_chars
        self.min_break_chars = min_break_chars
        self.max_keywords = max_keywords

    def spans(self, text: str) -> list[tuple[str, int, int]]:
        """``(stripped_text, char_start, char_end)`` for each non-blank slice."""
        if not text.strip():
            return [("", 0, 0)]

        spans: list[tuple[str, int, int]] = []
        cursor = 0
        length = len(text)
        while cursor < length:
            end = min(length, cursor + self.max_chars)
            if end < length:
                newline = text.rfind("\n", cursor, end + 1)
                if newline > cursor + self.min_break_chars:
                    end = newline
            piece = text[cursor:end].strip()
            if piece:
                spans.append((piece, cursor, end))
            cursor = max(end, cursor + 1)
        return spans or [("", 0, 0)]

    def chunk(self, source_id: str, content: str) -> list[Chunk]:
        return [
            Chunk(
                chunk_id=f"{source_id}:chunk:{position}",
                source_id=source_id,
                text=piece,
                position=position,
                char_start=start,
                char_end=end,
                token_estimate=estimate_tokens(piece),
                keywords=tuple(keywords(piece, self.max_keywords)),
            )
            for position, (piece, start, end) in enumerate(self.spans(content))
        ]
