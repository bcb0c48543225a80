"""Command line entry point for building the search artifact.

Usage:
    blog-search-build --input posts-export.json --output public/search-index.json
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from blog_search.config import Settings
from blog_search.observability.logging import configure_logging
from blog_search.search.errors import SearchIndexError
from blog_search.search.indexer import DEFAULT_VERSION, build_index, load_rows
from blog_search.search.storage import ArtifactStore


logger = logging.getLogger(__name__)


def _parse_version(value: str) -> int | str:
    if value == "legacy":
        return value
    try:
        version = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid artifact version {value!r}") from exc
    if version not in (2, 3):
        raise argparse.ArgumentTypeError("artifact version must be 2, 3 or 'legacy'")
    return version


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build the BM25 search index artifact from a post export.")
    parser.add_argument("--input", "-i", type=Path, required=True, help="JSON export of post rows")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Artifact path (defaults to ARTIFACT_PATH, public/search-index.json)",
    )
    parser.add_argument(
        "--format-version",
        type=_parse_version,
        default=DEFAULT_VERSION,
        help="Artifact format: 3 (default), 2, or legacy",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--plain-logs", action="store_true", help="Human-readable logs instead of JSON")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(
        args.log_level or settings.log_level,
        json_output=settings.log_json and not args.plain_logs,
        logger_levels=settings.log_levels,
    )

    output = args.output or settings.artifact_path
    try:
        result = build_index(load_rows(args.input), version=args.format_version)
        ArtifactStore(output).save(result.artifact)
    except (SearchIndexError, OSError) as exc:
        logger.error("Search index build failed: %s", exc)
        return 1

    logger.info(
        "Search index written to %s (%d items, vocab=%d)",
        output,
        result.documents_indexed,
        result.vocabulary_size,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
