"""Prometheus metrics for the search service and index builder."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_REQUESTS = Counter(
    "blog_search_requests_total",
    "Total search requests",
    ["artifact_kind", "outcome"],
)

SEARCH_LATENCY = Histogram(
    "blog_search_latency_seconds",
    "Search query latency",
    ["artifact_kind"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

ACQUISITION_FAILURES = Counter(
    "blog_search_artifact_acquisition_failures_total",
    "Failed attempts to acquire the search artifact",
    ["strategy"],
)

ACQUISITION_SUCCESSES = Counter(
    "blog_search_artifact_acquisitions_total",
    "Successful search artifact acquisitions",
    ["strategy"],
)

CACHE_LOOKUPS = Counter(
    "blog_search_artifact_cache_lookups_total",
    "Artifact cache lookups",
    ["result"],
)

INDEXED_DOCUMENTS = Gauge(
    "blog_search_indexed_documents",
    "Documents in the currently cached search artifact",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics(registry: CollectorRegistry = REGISTRY) -> bytes:
    """Return Prometheus exposition output."""
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
