"""Unit tests for search stats helpers."""

from __future__ import annotations

import math

from blog_search.search.stats import average_length, bm25, calculate_idf


def test_calculate_idf_matches_smoothed_formula() -> None:
    assert math.isclose(calculate_idf(doc_freq=1, total_docs=3), math.log(2.5 / 1.5 + 1))


def test_calculate_idf_decreases_with_document_frequency() -> None:
    idf_rare = calculate_idf(doc_freq=1, total_docs=10)
    idf_common = calculate_idf(doc_freq=5, total_docs=10)
    idf_everywhere = calculate_idf(doc_freq=10, total_docs=10)

    assert idf_rare > idf_common > idf_everywhere > 0


def test_bm25_matches_reference_value() -> None:
    expected = (3 * 2.2) / (3 + 1.2 * (1 - 0.75 + 0.75 * 1))
    assert math.isclose(bm25(tf=3, doc_length=3, avg_doc_length=3), expected)


def test_bm25_respects_term_frequency_and_length() -> None:
    assert bm25(tf=3, doc_length=100, avg_doc_length=80) > bm25(tf=1, doc_length=100, avg_doc_length=80)
    assert bm25(tf=2, doc_length=10, avg_doc_length=80) > bm25(tf=2, doc_length=200, avg_doc_length=80)


def test_bm25_floors_zero_average_length() -> None:
    assert bm25(tf=1, doc_length=4, avg_doc_length=0) == bm25(tf=1, doc_length=4, avg_doc_length=1)


def test_bm25_floors_zero_denominator() -> None:
    assert bm25(tf=0, doc_length=0, avg_doc_length=1, b=1.0) == 0.0


def test_average_length_handles_empty_corpus() -> None:
    assert average_length([]) == 0
    assert average_length([16, 11, 10]) == 37 / 3
