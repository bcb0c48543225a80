"""Statistical helpers for BM25 style scoring.

The functions here stay independent of the artifact layout so the inverted
(v3) and forward (v2) scorers share one definition of the ranking formula.
"""

from __future__ import annotations

from collections.abc import Iterable
import math


DEFAULT_K1 = 1.2
DEFAULT_B = 0.75


def average_length(lengths: Iterable[int]) -> float:
    """Return the mean document length, treating an empty corpus as one document."""

    values = list(lengths)
    total_docs = len(values) or 1
    return sum(values) / total_docs


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return inverse document frequency, ``ln((N - df + 0.5) / (df + 0.5) + 1)``.

    The ``+ 1`` inside the logarithm keeps the value positive even when a term
    appears in every document.
    """

    return math.log((total_docs - doc_freq + 0.5) / (doc_freq + 0.5) + 1)


def bm25(
    tf: int,
    doc_length: int,
    avg_doc_length: float,
    *,
    k1: float = DEFAULT_K1,
    b: float = DEFAULT_B,
) -> float:
    """Compute the BM25 term weight without IDF."""

    avdl = avg_doc_length or 1
    denominator = tf + k1 * (1 - b + b * (doc_length / avdl))
    return (tf * (k1 + 1)) / (denominator or 1)
