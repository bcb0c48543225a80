"""Unit tests for the tokenization pipeline."""

from __future__ import annotations

import re

import pytest

from blog_search.search.analyzers import STOPWORDS, normalize_text, tokenize, tokenize_query


def test_tokenize_lowercases_splits_and_filters() -> None:
    assert tokenize("The Cat's in the HAT!") == ["cat", "hat"]


def test_tokenize_repeats_each_token_by_weight() -> None:
    assert tokenize("Tokyo trip", 3) == ["tokyo", "tokyo", "tokyo", "trip", "trip", "trip"]


@pytest.mark.parametrize("text", [None, "", "   ", "a I & ! x"])
def test_tokenize_returns_empty_for_blank_or_filtered_input(text) -> None:
    assert tokenize(text, 2) == []


def test_tokenize_treats_non_ascii_letters_as_separators() -> None:
    assert tokenize("café-au-lait 2024") == ["caf", "au", "lait", "2024"]


@pytest.mark.parametrize(
    "text",
    [
        "Reykjavík — 10 days, 3 waterfalls & one volcano!!",
        "snake_case CamelCase kebab-case x1 y22",
        "Their tour was from the north; we will return.",
    ],
)
def test_tokenize_is_deterministic_and_emits_only_valid_tokens(text: str) -> None:
    first = tokenize(text, 2)
    assert first == tokenize(text, 2)
    for token in first:
        assert re.fullmatch(r"[a-z0-9]{2,}", token)
        assert token not in STOPWORDS


def test_tokenize_query_keeps_stopwords_but_drops_short_tokens() -> None:
    assert tokenize_query("The a Cat") == ["the", "cat"]


def test_tokenize_query_preserves_order_and_duplicates() -> None:
    assert tokenize_query("ramen RAMEN tokyo") == ["ramen", "ramen", "tokyo"]


def test_normalize_text_strips_nul_and_whitespace() -> None:
    assert normalize_text("  hello\x00 world \n") == "hello world"
    assert normalize_text(None) == ""
