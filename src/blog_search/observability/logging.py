"""Structured JSON logging for the builder and the search API."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from blog_search.observability.context import current_trace_ids


SERVICE_NAME = "blog-search"

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

# Loggers that are chatty at INFO for every artifact fetch.
QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with the request's trace ids."""

    REDACT_KEYS = frozenset({"authorization", "cookie", "password", "secret", "token"})
    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500

    def __init__(self, service: str = SERVICE_NAME) -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        ids = current_trace_ids()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ids.trace_id,
            "span_id": ids.span_id,
        }
        if record.name.startswith("blog_search."):
            entry["component"] = record.name.rsplit(".", 1)[-1]
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if key.lower() in self.REDACT_KEYS:
                entry[key] = "[REDACTED]"
            elif isinstance(value, str):
                entry[key] = _clip(value, self.MAX_EXTRA_LEN)
            else:
                entry[key] = value

        return orjson.dumps(entry, default=_json_default).decode("utf-8")


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return list(value)
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    return repr(value)


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    level: str = "info",
    json_output: bool = True,
    *,
    logger_levels: Mapping[str, str] | None = None,
    access_log: bool = False,
) -> None:
    """Replace the root handlers with a single stdout handler.

    Args:
        level: Root level name, case-insensitive; unknown names fall back to INFO.
        json_output: Emit one JSON object per record instead of plain text.
        logger_levels: Per-logger overrides, applied after the defaults below.
        access_log: Keep uvicorn's per-request access lines at the root level.
    """
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.NOTSET if access_log else logging.WARNING)

    for name, override in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_resolve_level(override))
