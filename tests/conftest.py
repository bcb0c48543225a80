"""Shared test fixtures."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from blog_search.search.indexer import build_index
from blog_search.search.storage import ArtifactStore


SAMPLE_ROWS: list[dict[str, Any]] = [
    {
        "path": "/2024/05/tokyo-trip",
        "slug": "tokyo-trip",
        "title": "Tokyo Trip",
        "author": "Alex",
        "excerpt": "Neon nights",
        "content": "Ramen and temples in Tokyo.",
        "date": "2024-05-01T10:00:00Z",
        "timezone": "Asia/Tokyo",
        "tags": ["travel", "japan"],
        "thumbnail": "https://cdn.example.com/tokyo.jpg",
        "width": "large",
    },
    {
        "slug": "spring-garden",
        "title": "Spring Garden",
        "author": "Alex",
        "content": "Planting tomatoes and basil.",
        "date": "2024-04-01T08:00:00Z",
        "timezone": "America/New_York",
        "tags": "home",
    },
    {
        "path": "/2023/08/album-iceland",
        "slug": "album-iceland",
        "title": "Iceland Album",
        "author": "Sam",
        "content": None,
        "date_utc": "2023-08-01T12:00:00Z",
        "timezone": "Atlantic/Reykjavik",
        "tags": '["travel","photos"]',
        "width": "small",
    },
]


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo handler changes made by configure_logging() inside a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def sample_rows() -> list[dict[str, Any]]:
    return [dict(row) for row in SAMPLE_ROWS]


@pytest.fixture
def v3_artifact(sample_rows):
    return build_index(sample_rows).artifact


@pytest.fixture
def artifact_file(tmp_path: Path, v3_artifact) -> Path:
    return ArtifactStore(tmp_path / "public" / "search-index.json").save(v3_artifact)
