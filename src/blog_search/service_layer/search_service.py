"""Search service orchestration layer.

Combines artifact acquisition, caching and BM25 scoring behind one call so the
HTTP layer never deals with artifact versions or degraded corpora.
"""

from __future__ import annotations

import logging
from typing import Any

from blog_search.observability.metrics import INDEXED_DOCUMENTS, SEARCH_LATENCY, SEARCH_REQUESTS, track_latency
from blog_search.observability.tracing import create_span
from blog_search.search.acquisition import ArtifactLoader
from blog_search.search.bm25_engine import BM25SearchEngine, normalize_query
from blog_search.search.cache import ArtifactCache
from blog_search.search.models import Artifact, PostSummary


logger = logging.getLogger(__name__)


class SearchService:
    """High-level search orchestration service.

    The cache is injected so tests and multi-app processes control its
    lifetime; it is never module-global.
    """

    def __init__(self, loader: ArtifactLoader, cache: ArtifactCache, engine: BM25SearchEngine) -> None:
        self.loader = loader
        self.cache = cache
        self.engine = engine

    async def get_artifact(self) -> Artifact:
        artifact = await self.cache.get_or_load(self.loader.load)
        INDEXED_DOCUMENTS.set(artifact.doc_count)
        return artifact

    async def search(self, raw_query: Any) -> list[PostSummary]:
        """Return ranked summaries; blank or non-string queries return ``[]`` without loading."""

        if not normalize_query(raw_query):
            SEARCH_REQUESTS.labels(artifact_kind="none", outcome="empty_query").inc()
            return []

        artifact = await self.get_artifact()
        with (
            create_span("search.query", attributes={"search.artifact.kind": artifact.kind}),
            track_latency(SEARCH_LATENCY, artifact_kind=artifact.kind),
        ):
            results = self.engine.search(artifact, raw_query)

        SEARCH_REQUESTS.labels(artifact_kind=artifact.kind, outcome="hit" if results else "miss").inc()
        logger.debug("Search returned %d results", len(results), extra={"artifact_kind": artifact.kind})
        return results

    def status(self) -> dict[str, Any]:
        entry = self.cache.entry
        artifact = entry.data if entry else None
        return {
            "artifact_kind": artifact.kind if artifact else None,
            "documents": artifact.doc_count if artifact else 0,
            "cache_age_seconds": self.cache.age(),
            "cache_ttl_seconds": self.cache.ttl_seconds,
        }
