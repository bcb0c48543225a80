"""Exception hierarchy for the search index."""

from __future__ import annotations


class SearchIndexError(Exception):
    """Base class for search index failures."""


class InvalidPostError(SearchIndexError, ValueError):
    """Raised when a content row lacks fields required for indexing."""


class IndexBuildError(SearchIndexError):
    """Raised when a build run must be aborted without writing an artifact."""


class ArtifactFormatError(SearchIndexError, ValueError):
    """Raised when a payload does not match any known artifact shape."""


class AcquisitionError(SearchIndexError):
    """Raised by an acquisition strategy that could not produce an artifact."""

    def __init__(self, strategy: str, reason: str) -> None:
        super().__init__(f"{strategy}: {reason}")
        self.strategy = strategy
        self.reason = reason
