"""Offline index builder for the blog search artifact.

The builder consumes the full post export in one pass, tokenizes every field
with its boost weight and emits one of the versioned artifacts. New builds
emit v3 (inverted postings); v2 and the legacy substring array remain
available for environments still serving older readers.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any

import orjson

from blog_search.search.analyzers import normalize_text, tokenize
from blog_search.search.errors import IndexBuildError, InvalidPostError
from blog_search.search.models import (
    Artifact,
    Document,
    ForwardIndex,
    InvertedIndex,
    LegacyEntry,
    LegacyIndex,
    PackedDocument,
    PostRecord,
)
from blog_search.search.stats import average_length


logger = logging.getLogger(__name__)

FIELD_WEIGHTS: Mapping[str, int] = {
    "title": 3,
    "author": 1,
    "tags": 2,
    "excerpt": 1,
    "content": 1,
}

SUPPORTED_VERSIONS = ("legacy", 2, 3)
DEFAULT_VERSION = 3


def build_document(record: PostRecord) -> Document:
    """Tokenize a post into weighted term frequencies.

    Field order is title, author, each tag, excerpt, content.
    """

    tokens = [
        *tokenize(normalize_text(record.title), FIELD_WEIGHTS["title"]),
        *tokenize(normalize_text(record.author), FIELD_WEIGHTS["author"]),
    ]
    for tag in record.tags:
        tokens.extend(tokenize(normalize_text(tag), FIELD_WEIGHTS["tags"]))
    tokens.extend(tokenize(normalize_text(record.excerpt), FIELD_WEIGHTS["excerpt"]))
    tokens.extend(tokenize(normalize_text(record.content), FIELD_WEIGHTS["content"]))
    return Document(meta=record.to_meta(), tf=Counter(tokens), dl=len(tokens))


def _haystack(record: PostRecord) -> str:
    parts = [record.title, record.excerpt or "", record.content, " ".join(record.tags), record.author]
    return " ".join(normalize_text(part) for part in parts if part).lower()


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of a build run."""

    artifact: Artifact
    documents_indexed: int
    vocabulary_size: int


class IndexBuilder:
    """Accumulate post records and produce an immutable artifact."""

    def __init__(self) -> None:
        self._records: list[PostRecord] = []
        self._documents: list[Document] = []

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, record: PostRecord) -> Document:
        document = build_document(record)
        self._records.append(record)
        self._documents.append(document)
        return document

    def build(self, version: int | str = DEFAULT_VERSION) -> IndexBuildResult:
        """Return the artifact for every added record in insertion order."""

        if version == "legacy":
            entries = tuple(
                LegacyEntry(meta=doc.meta, haystack=_haystack(record))
                for record, doc in zip(self._records, self._documents, strict=True)
            )
            artifact: Artifact = LegacyIndex(entries=entries)
            return IndexBuildResult(artifact=artifact, documents_indexed=len(self), vocabulary_size=0)
        if version not in (2, 3):
            raise IndexBuildError(f"Unsupported artifact version {version!r}; expected one of {SUPPORTED_VERSIONS}")

        total_docs = len(self._documents) or 1
        avdl = average_length(doc.dl for doc in self._documents)

        vocab: dict[str, int] = {}
        df: list[int] = []
        for doc in self._documents:
            for token in doc.tf:
                token_id = vocab.get(token)
                if token_id is None:
                    token_id = len(vocab)
                    vocab[token] = token_id
                    df.append(0)
                df[token_id] += 1

        if version == 2:
            packed = tuple(
                PackedDocument(
                    meta=doc.meta,
                    dl=doc.dl,
                    terms=[value for token, freq in doc.tf.items() for value in (vocab[token], freq)],
                )
                for doc in self._documents
            )
            artifact = ForwardIndex(total_docs=total_docs, avdl=avdl, df=df, vocab=vocab, docs=packed)
        else:
            postings: list[list[int]] = [[] for _ in range(len(vocab))]
            for doc_index, doc in enumerate(self._documents):
                for token, freq in doc.tf.items():
                    postings[vocab[token]].extend((doc_index, freq))
            packed = tuple(PackedDocument(meta=doc.meta, dl=doc.dl) for doc in self._documents)
            artifact = InvertedIndex(
                total_docs=total_docs, avdl=avdl, df=df, vocab=vocab, docs=packed, postings=postings
            )

        return IndexBuildResult(artifact=artifact, documents_indexed=len(self), vocabulary_size=len(vocab))


def parse_records(rows: Iterable[Any]) -> list[PostRecord]:
    """Validate every row before indexing; any defect aborts the run.

    Each rejected row is logged so a single run surfaces every defect.
    """

    records: list[PostRecord] = []
    rejected = 0
    for position, row in enumerate(rows):
        try:
            records.append(PostRecord.from_row(row))
        except InvalidPostError as exc:
            rejected += 1
            logger.warning("Rejected row %d: %s", position, exc, extra={"row_position": position})
    if rejected:
        raise IndexBuildError(f"{rejected} row(s) failed validation; refusing to write a partial index")
    return records


def build_index(rows: Iterable[Any], *, version: int | str = DEFAULT_VERSION) -> IndexBuildResult:
    """Build an artifact from raw content-source rows."""

    builder = IndexBuilder()
    for record in parse_records(rows):
        builder.add(record)
    result = builder.build(version)
    logger.info(
        "Built %s search index: %d documents, vocabulary=%d",
        result.artifact.kind,
        result.documents_indexed,
        result.vocabulary_size,
    )
    return result


def extract_rows(payload: Any) -> list[Any]:
    """Return the row list from a content-source export.

    Accepts a bare row array, a statement result object (``results`` or
    ``result``), or an array of statement results; the last statement with rows
    wins.
    """

    if isinstance(payload, Mapping):
        for key in ("results", "result"):
            rows = payload.get(key)
            if isinstance(rows, list):
                return rows
        raise IndexBuildError("Export object has no 'results' or 'result' array")
    if isinstance(payload, list):
        statements = [item for item in payload if isinstance(item, Mapping) and ("results" in item or "result" in item)]
        if not statements or len(statements) != len(payload):
            return payload
        rows: list[Any] = []
        for statement in statements:
            for key in ("result", "results"):
                candidate = statement.get(key)
                if isinstance(candidate, list):
                    rows = candidate
        return rows
    raise IndexBuildError(f"Unsupported export payload of type {type(payload).__name__}")


def load_rows(path: str | Path) -> list[Any]:
    """Read a content-source export from disk."""

    source = Path(path)
    try:
        payload = orjson.loads(source.read_bytes())
    except (OSError, orjson.JSONDecodeError) as exc:
        raise IndexBuildError(f"Could not read post export {source}: {exc}") from exc
    return extract_rows(payload)
