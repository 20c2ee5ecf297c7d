"""In-memory lexical index and redundancy detection."""

from diffcommit.index.chunker import DraftChunker
from diffcommit.index.service import LexicalIndex

__all__ = ["DraftChunker", "LexicalIndex"]
