"""BM25 query engine over the versioned search artifacts."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any

from blog_search.search.analyzers import tokenize_query
from blog_search.search.models import (
    Artifact,
    ForwardIndex,
    InvertedIndex,
    LegacyIndex,
    PostSummary,
)
from blog_search.search.stats import DEFAULT_B, DEFAULT_K1, bm25, calculate_idf


DEFAULT_RESULT_LIMIT = 50


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the BM25 engine."""

    doc_id: int
    score: float


@dataclass(frozen=True)
class QueryTerm:
    """A query token resolved against the artifact vocabulary."""

    token_id: int
    idf: float


def normalize_query(raw_query: Any) -> str:
    """Return the trimmed, lowercased query; non-strings count as empty."""

    if not isinstance(raw_query, str):
        return ""
    return raw_query.strip().lower()


class BM25SearchEngine:
    """Score queries against any supported artifact shape."""

    def __init__(self, *, k1: float = DEFAULT_K1, b: float = DEFAULT_B, limit: int = DEFAULT_RESULT_LIMIT) -> None:
        self.k1 = k1
        self.b = b
        self.limit = limit

    def search(self, artifact: Artifact, raw_query: Any) -> list[PostSummary]:
        """Return at most ``limit`` summaries for ``raw_query``."""

        query = normalize_query(raw_query)
        if not query:
            return []

        if artifact.kind == LegacyIndex.kind:
            return self._scan_legacy(artifact, query)

        terms = self.resolve_terms(artifact, tokenize_query(query))
        if not terms:
            return []
        if artifact.kind == InvertedIndex.kind:
            scores = self._score_inverted(artifact, terms)
        elif artifact.kind == ForwardIndex.kind:
            scores = self._score_forward(artifact, terms)
        else:  # pragma: no cover - exhaustive over Artifact
            raise TypeError(f"Unsupported artifact kind {artifact.kind!r}")

        ranked = self.rank(artifact, scores)
        return [PostSummary.from_meta(artifact.docs[entry.doc_id].meta) for entry in ranked]

    def resolve_terms(self, artifact: ForwardIndex | InvertedIndex, tokens: list[str]) -> list[QueryTerm]:
        """Map tokens to vocabulary ids, dropping tokens the index never saw.

        Repeated query tokens are kept, so a repeated word counts once per
        occurrence.
        """

        terms: list[QueryTerm] = []
        for token in tokens:
            token_id = artifact.vocab.get(token)
            if token_id is None:
                continue
            doc_freq = artifact.df[token_id] if token_id < len(artifact.df) else 0
            terms.append(QueryTerm(token_id=token_id, idf=calculate_idf(doc_freq or 0, artifact.total_docs)))
        return terms

    def _weight(self, idf: float, tf: int, dl: int, avdl: float) -> float:
        return idf * bm25(tf, dl, avdl, k1=self.k1, b=self.b)

    def _score_inverted(self, artifact: InvertedIndex, terms: list[QueryTerm]) -> dict[int, float]:
        doc_scores: dict[int, float] = defaultdict(float)
        for term in terms:
            postings = artifact.postings[term.token_id] if term.token_id < len(artifact.postings) else []
            for i in range(0, len(postings), 2):
                doc_id, tf = postings[i], postings[i + 1]
                doc_scores[doc_id] += self._weight(term.idf, tf, artifact.docs[doc_id].dl, artifact.avdl)
        return doc_scores

    def _score_forward(self, artifact: ForwardIndex, terms: list[QueryTerm]) -> dict[int, float]:
        doc_scores: dict[int, float] = defaultdict(float)
        for doc_id, doc in enumerate(artifact.docs):
            pairs = doc.terms or []
            frequencies = {pairs[i]: pairs[i + 1] for i in range(0, len(pairs), 2)}
            for term in terms:
                tf = frequencies.get(term.token_id)
                if tf:
                    doc_scores[doc_id] += self._weight(term.idf, tf, doc.dl, artifact.avdl)
        return doc_scores

    def rank(self, artifact: ForwardIndex | InvertedIndex, doc_scores: dict[int, float]) -> list[RankedDocument]:
        """Sort by score descending, then by date string descending."""

        ranked = sorted(
            (RankedDocument(doc_id=doc_id, score=score) for doc_id, score in doc_scores.items() if score > 0),
            key=lambda entry: (entry.score, artifact.docs[entry.doc_id].meta.date),
            reverse=True,
        )
        return ranked[: self.limit]

    def _scan_legacy(self, artifact: LegacyIndex, query: str) -> list[PostSummary]:
        results: list[PostSummary] = []
        for entry in artifact.entries:
            if query not in entry.haystack:
                continue
            results.append(PostSummary.from_meta(entry.meta))
            if len(results) >= self.limit:
                break
        return results
