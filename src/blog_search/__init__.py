"""BM25 search index builder and query service for the blog."""

__version__ = "0.1.0"
