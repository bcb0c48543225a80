"""Analyzer utilities for the blog search index.

Tokenization is a small composable pipeline in the Whoosh style: a regex
tokenizer yields ``Token`` records and filters transform the stream. The index
builder and the query path share the tokenizer but not the filter chain; query
text is never stop-word filtered.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
import re
from typing import Protocol


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


STOPWORDS = frozenset(
    [
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "but",
        "by",
        "for",
        "if",
        "in",
        "into",
        "is",
        "it",
        "no",
        "not",
        "of",
        "on",
        "or",
        "such",
        "that",
        "the",
        "their",
        "then",
        "there",
        "these",
        "they",
        "this",
        "to",
        "was",
        "will",
        "with",
        "you",
        "your",
        "i",
        "we",
        "our",
        "from",
    ]
)

MIN_TOKEN_LENGTH = 2


class LowercaseRegexTokenizer:
    """Lowercases the input, then yields maximal ``[a-z0-9]`` runs."""

    def __init__(self, pattern: str = r"[a-z0-9]+") -> None:
        self.pattern = re.compile(pattern)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text.lower())):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = MIN_TOKEN_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if len(token.text) >= self.min_length:
                yield token


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self.stopwords = frozenset(stopwords) if stopwords is not None else STOPWORDS

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text not in self.stopwords:
                yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


INDEX_ANALYZER = AnalyzerPipeline(LowercaseRegexTokenizer(), [MinLengthFilter(), StopFilter()])
QUERY_ANALYZER = AnalyzerPipeline(LowercaseRegexTokenizer(), [MinLengthFilter()])


def normalize_text(value: object) -> str:
    """Return ``value`` as text with NUL characters removed and whitespace trimmed."""

    if value is None:
        return ""
    return str(value).replace("\x00", "").strip()


def tokenize(text: str | None, weight: int = 1) -> list[str]:
    """Return index tokens for ``text``, each repeated ``weight`` times.

    Repetition is how field boosts reach term frequency: a title token
    tokenized with ``weight=3`` counts three times in the document.
    """

    if not text or weight <= 0:
        return []
    out: list[str] = []
    for token in INDEX_ANALYZER(text):
        out.extend([token.text] * weight)
    return out


def tokenize_query(text: str | None) -> list[str]:
    """Return query tokens in input order (duplicates preserved)."""

    if not text:
        return []
    return [token.text for token in QUERY_ANALYZER(text)]
