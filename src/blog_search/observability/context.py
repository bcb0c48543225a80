"""Request-scoped trace ids shared by log records and spans."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, replace
import re
import secrets


_TRACE_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")


@dataclass(frozen=True, slots=True)
class TraceIds:
    """W3C-sized trace and span ids for the current request."""

    trace_id: str
    span_id: str

    def with_span(self, span_id: str) -> TraceIds:
        return replace(self, span_id=span_id)


_current_ids: ContextVar[TraceIds | None] = ContextVar("blog_search_trace_ids", default=None)


def new_trace_id() -> str:
    return secrets.token_hex(16)


def new_span_id() -> str:
    return secrets.token_hex(8)


def current_trace_ids() -> TraceIds:
    """Return the ids bound to this context, seeding a fresh trace when none is bound."""
    ids = _current_ids.get()
    if ids is None:
        ids = TraceIds(new_trace_id(), new_span_id())
        _current_ids.set(ids)
    return ids


def start_request_trace(incoming_trace_id: str | None = None) -> TraceIds:
    """Bind ids for a new request.

    A caller-supplied trace id is kept when it is 32 lowercase hex characters;
    anything else starts a new trace.
    """
    trace_id = (incoming_trace_id or "").strip().lower()
    if not _TRACE_ID_PATTERN.match(trace_id):
        trace_id = new_trace_id()
    ids = TraceIds(trace_id, new_span_id())
    _current_ids.set(ids)
    return ids


def enter_span(span_id: str) -> None:
    """Record the active span id while keeping the request's trace id."""
    _current_ids.set(current_trace_ids().with_span(span_id))
