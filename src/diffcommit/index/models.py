"""Data model of the in-memory lexical index."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SCHEMA_VERSION = 1


class IndexStatus(str, Enum):
    IDLE = "idle"
    READY = "ready"


class OverlapType(str, Enum):
    EXACT = "exact"
    NEAR_DUPLICATE = "near_duplicate"


@dataclass(frozen=True)
class Source:
    """The indexed representation of one project's draft.

    Attributes:
        source_id: ``project:<sha1 of project path>``.
        project_id: Stable project identifier (folder name for legacy projects).
        path: Project folder.
        title: Project folder name.
        updated_at: Draft modification time, epoch milliseconds.
        content_hash: SHA-1 of the raw draft.
        token_estimate: ``ceil(len(draft) / 4)``.
    """

    source_id: str
    project_id: str
    path: Path
    title: str
    updated_at: int
    content_hash: str
    token_estimate: int


@dataclass(frozen=True)
class Chunk:
    """A bounded slice of a draft. ``char_end`` is exclusive."""

    chunk_id: str
    source_id: str
    text: str
    position: int
    char_start: int
    char_end: int
    token_estimate: int
    keywords: tuple[str, ...] = ()


@dataclass
class IndexStats:
    repository_path: Path
    schema_version: int = SCHEMA_VERSION
    built_at: int | None = None
    source_count: int = 0
    chunk_count: int = 0
    status: IndexStatus = IndexStatus.IDLE


@dataclass(frozen=True)
class RetrievedChunk:
    chunk: Chunk
    source: Source
    score: int


@dataclass
class QueryResult:
    query: str
    chunks: list[RetrievedChunk] = field(default_factory=list)


@dataclass(frozen=True)
class RedundancyPair:
    a_source_id: str
    b_source_id: str
    similarity: float
    overlap_type: OverlapType
    rationale: str


@dataclass(frozen=True)
class RedundancyGroup:
    group_id: str
    source_ids: tuple[str, ...]
    summary: str


@dataclass
class RedundancyReport:
    repository_path: Path
    created_at: int
    pairs: list[RedundancyPair] = field(default_factory=list)
    groups: list[RedundancyGroup] = field(default_factory=list)
