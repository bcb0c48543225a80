"""Single-slot TTL cache for the loaded search artifact.

The cache is instance-local and lock-free: ``put`` replaces the whole
``CacheEntry`` in one assignment, so readers observe either the old or the
new pair. Concurrent refreshes after expiry may each run the loader; the last
writer wins.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
import time

from blog_search.observability.metrics import CACHE_LOOKUPS
from blog_search.search.models import Artifact


logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class CacheEntry:
    data: Artifact
    timestamp: float


class ArtifactCache:
    """Hold at most one artifact for ``ttl_seconds``."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: CacheEntry | None = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    def age(self) -> float | None:
        """Seconds since the current entry was stored, or ``None`` when empty."""

        entry = self._entry
        if entry is None:
            return None
        return self._clock() - entry.timestamp

    def get(self) -> Artifact | None:
        """Return the cached artifact while it is fresh."""

        entry = self._entry
        if entry is None or self._clock() - entry.timestamp >= self.ttl_seconds:
            return None
        return entry.data

    def put(self, data: Artifact) -> None:
        self._entry = CacheEntry(data=data, timestamp=self._clock())

    def clear(self) -> None:
        self._entry = None

    async def get_or_load(self, loader: Callable[[], Awaitable[Artifact]]) -> Artifact:
        """Return the fresh artifact, running ``loader`` when stale or empty."""

        cached = self.get()
        if cached is not None:
            CACHE_LOOKUPS.labels(result="hit").inc()
            return cached

        CACHE_LOOKUPS.labels(result="miss").inc()
        logger.debug("Search artifact cache stale or empty; reloading")
        data = await loader()
        self.put(data)
        return data
