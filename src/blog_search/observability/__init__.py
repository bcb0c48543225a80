"""Observability module for structured logging, Prometheus metrics, and tracing."""

from blog_search.observability.context import TraceIds, current_trace_ids, start_request_trace
from blog_search.observability.logging import JsonFormatter, configure_logging
from blog_search.observability.metrics import (
    ACQUISITION_FAILURES,
    ACQUISITION_SUCCESSES,
    CACHE_LOOKUPS,
    INDEXED_DOCUMENTS,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from blog_search.observability.tracing import TraceContextMiddleware, create_span, get_tracer, init_tracing


__all__ = [
    "ACQUISITION_FAILURES",
    "ACQUISITION_SUCCESSES",
    "CACHE_LOOKUPS",
    "INDEXED_DOCUMENTS",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "TraceIds",
    "configure_logging",
    "create_span",
    "current_trace_ids",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "init_tracing",
    "start_request_trace",
    "track_latency",
]
