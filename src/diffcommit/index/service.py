"""Lexical index over the projects of a repository.

The index is an in-memory, point-in-time snapshot keyed by repository path.
It is never written to disk and never invalidated by file changes: it is
rebuilt on request, or on first use by a query.

Scoring for ``query_index``::

    score(chunk) = |query tokens ∩ chunk keywords| + phrase_bonus·[query ⊂ chunk text]

Redundancy between two sources is 1.0 when their content hashes match
("exact"), otherwise the Jaccard index of their token sets ("near_duplicate").
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path

from diffcommit.config import DiffCommitConfig
from diffcommit.hierarchy.guard import now_ms
from diffcommit.index.chunker import DraftChunker
from diffcommit.index.models import (
    Chunk,
    IndexStats,
    IndexStatus,
    OverlapType,
    QueryResult,
    RedundancyGroup,
    RedundancyPair,
    RedundancyReport,
    RetrievedChunk,
    Source,
)
from diffcommit.index.tokens import content_hash, estimate_tokens, normalize_text, tokenize
from diffcommit.store.project_store import ProjectStore

logger = logging.getLogger(__name__)


@dataclass
class _IndexEntry:
    stats: IndexStats
    sources: list[Source]
    chunks: list[Chunk]


def source_id_for(project_path: Path) -> str:
    return f"project:{content_hash(str(project_path))}"


def similarity(a_hash: str, b_hash: str, a_tokens: set[str], b_tokens: set[str]) -> tuple[float, OverlapType]:
    """Similarity of two sources; symmetric in its arguments."""
    if a_hash == b_hash:
        return 1.0, OverlapType.EXACT
    union = len(a_tokens | b_tokens) or 1
    return len(a_tokens & b_tokens) / union, OverlapType.NEAR_DUPLICATE


class LexicalIndex:
    """Per-repository keyword index and redundancy detector.

    Construct one per process (or per test) and pass it to callers; instances
    share nothing.
    """

    def __init__(self, store: ProjectStore, config: DiffCommitConfig | None = None) -> None:
        self.store = store
        self.config = config or DiffCommitConfig()
        self.chunker = DraftChunker(
            max_chars=self.config.index.max_chunk_chars,
            min_break_chars=self.config.index.min_break_chars,
            max_keywords=self.config.index.max_keywords,
        )
        self._cache: dict[Path, _IndexEntry] = {}
        self._lock = threading.Lock()

    def _key(self, repository_path: str | os.PathLike[str]) -> Path:
        return self.store.repository_path(repository_path)

    # ------------------------------------------------------------------
    # Build / status / clear
    # ------------------------------------------------------------------

    def build_index(self, repository_path: str | os.PathLike[str]) -> IndexStats:
        """Scan every project of the repository and replace its cached index."""
        repository = self._key(repository_path)
        sources: list[Source] = []
        chunks: list[Chunk] = []

        for summary in self.store.scan_projects(repository):
            sid = source_id_for(summary.path)
            sources.append(
                Source(
                    source_id=sid,
                    project_id=summary.id,
                    path=summary.path,
                    title=summary.name,
                    updated_at=summary.updated_at,
                    content_hash=content_hash(summary.content),
                    token_estimate=estimate_tokens(summary.content),
                )
            )
            chunks.extend(self.chunker.chunk(sid, summary.content))

        stats = IndexStats(
            repository_path=repository,
            built_at=now_ms(),
            source_count=len(sources),
            chunk_count=len(chunks),
            status=IndexStatus.READY,
        )
        with self._lock:
            self._cache[repository] = _IndexEntry(stats=stats, sources=sources, chunks=chunks)
        logger.info(
            "Indexed %s: %d sources, %d chunks", repository, stats.source_count, stats.chunk_count
        )
        return stats

    def get_index_status(self, repository_path: str | os.PathLike[str]) -> IndexStats:
        repository = self._key(repository_path)
        with self._lock:
            entry = self._cache.get(repository)
        if entry is None:
            return IndexStats(repository_path=repository)
        return entry.stats

    def clear_index(self, repository_path: str | os.PathLike[str]) -> bool:
        repository = self._key(repository_path)
        with self._lock:
            self._cache.pop(repository, None)
        return True

    def _entry(self, repository_path: str | os.PathLike[str]) -> _IndexEntry:
        repository = self._key(repository_path)
        with self._lock:
            entry = self._cache.get(repository)
        if entry is None:
            self.build_index(repository)
            with self._lock:
                entry = self._cache[repository]
        return entry

    def list_sources(self, repository_path: str | os.PathLike[str]) -> list[Source]:
        """Sources of the cached index, building it first if needed."""
        return list(self._entry(repository_path).sources)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_index(
        self,
        repository_path: str | os.PathLike[str],
        query: str,
        top_k: int | None = None,
    ) -> QueryResult:
        """Rank chunks against *query*; builds the index on first use.

        Ties are broken by more recently updated source first. Every chunk is
        a candidate, so zero-score chunks fill the tail when few match.
        """
        entry = self._entry(repository_path)
        limit = max(1, top_k if top_k is not None else self.config.index.top_k)
        query_tokens = set(tokenize(query))
        needle = query.lower()
        bonus = self.config.index.phrase_bonus
        sources = {s.source_id: s for s in entry.sources}

        scored: list[RetrievedChunk] = []
        for chunk in entry.chunks:
            source = sources.get(chunk.source_id)
            if source is None:
                continue
            hits = sum(1 for keyword in chunk.keywords if keyword in query_tokens)
            phrase = bonus if needle and needle in chunk.text.lower() else 0
            scored.append(RetrievedChunk(chunk=chunk, source=source, score=hits + phrase))

        scored.sort(key=lambda r: (-r.score, -r.source.updated_at))
        return QueryResult(query=query, chunks=scored[:limit])

    def find_redundancy(
        self,
        repository_path: str | os.PathLike[str],
        threshold: float | None = None,
        top_k: int | None = None,
    ) -> RedundancyReport:
        """Pairs of sources whose similarity is at least *threshold*, best first.

        Each retained pair becomes its own group; there is no transitive
        clustering. Sources with a blank draft are never compared.
        """
        entry = self._entry(repository_path)
        threshold = self.config.redundancy.threshold if threshold is None else threshold
        max_pairs = self.config.redundancy.top_k if top_k is None else top_k

        texts: dict[str, str] = {}
        for source in entry.sources:
            own = sorted(
                (c for c in entry.chunks if c.source_id == source.source_id),
                key=lambda c: c.position,
            )
            texts[source.source_id] = "\n".join(c.text for c in own)
        token_sets = {sid: set(tokenize(text)) for sid, text in texts.items()}

        pairs: list[RedundancyPair] = []
        for i, a in enumerate(entry.sources):
            for b in entry.sources[i + 1 :]:
                if not normalize_text(texts[a.source_id]) or not normalize_text(texts[b.source_id]):
                    continue
                score, overlap = similarity(
                    a.content_hash,
                    b.content_hash,
                    token_sets[a.source_id],
                    token_sets[b.source_id],
                )
                if score < threshold:
                    continue
                rationale = (
                    "Exact duplicate content hash."
                    if overlap is OverlapType.EXACT
                    else "Overlap detected by lexical similarity."
                )
                pairs.append(
                    RedundancyPair(
                        a_source_id=a.source_id,
                        b_source_id=b.source_id,
                        similarity=score,
                        overlap_type=overlap,
                        rationale=rationale,
                    )
                )

        pairs.sort(key=lambda p: p.similarity, reverse=True)
        pairs = pairs[: max(0, max_pairs)]
        groups = [
            RedundancyGroup(
                group_id=f"group-{n}",
                source_ids=(pair.a_source_id, pair.b_source_id),
                summary=f"{pair.overlap_type.value} overlap ({round(pair.similarity * 100)}%)",
            )
            for n, pair in enumerate(pairs, start=1)
        ]
        logger.debug("Redundancy scan of %s: %d pairs", entry.stats.repository_path, len(pairs))
        return RedundancyReport(
            repository_path=entry.stats.repository_path,
            created_at=now_ms(),
            pairs=pairs,
            groups=groups,
        )
