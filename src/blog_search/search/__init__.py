"""
Search indexing and query engine package.

This package provides a pure-Python search stack:
- analyzers: Tokenizer and filters (lowercase, length, stop words, field weights)
- models: Post records, result projections and the versioned index artifacts
- stats: BM25 scoring statistics
- indexer: Offline index builder
- storage: Atomic artifact persistence
- acquisition: Ordered artifact fetch strategies
- cache: TTL cache for the loaded artifact
- bm25_engine: Query scoring engine
"""
