"""Tests for the index build command."""

from __future__ import annotations

import json
import logging

import orjson

from blog_search.cli import main


def _write_export(tmp_path, rows):
    path = tmp_path / "export.json"
    path.write_text(json.dumps([{"results": rows, "success": True}]), encoding="utf-8")
    return path


def test_build_writes_v3_artifact(tmp_path, sample_rows) -> None:
    output = tmp_path / "public" / "search-index.json"

    exit_code = main(["--input", str(_write_export(tmp_path, sample_rows)), "--output", str(output), "--plain-logs"])

    assert exit_code == 0
    payload = orjson.loads(output.read_bytes())
    assert payload["v"] == 3
    assert len(payload["docs"]) == 3


def test_build_supports_v2(tmp_path, sample_rows) -> None:
    output = tmp_path / "index.json"

    exit_code = main(
        ["-i", str(_write_export(tmp_path, sample_rows)), "-o", str(output), "--format-version", "2", "--plain-logs"]
    )

    assert exit_code == 0
    assert orjson.loads(output.read_bytes())["v"] == 2


def test_invalid_row_fails_without_touching_previous_artifact(tmp_path, sample_rows) -> None:
    output = tmp_path / "index.json"
    output.write_bytes(b'{"v": 3, "previous": true}')

    exit_code = main(
        ["-i", str(_write_export(tmp_path, [*sample_rows, {"title": "no slug"}])), "-o", str(output), "--plain-logs"]
    )

    assert exit_code == 1
    assert orjson.loads(output.read_bytes()) == {"v": 3, "previous": True}


def test_missing_input_fails(tmp_path) -> None:
    output = tmp_path / "index.json"

    assert main(["-i", str(tmp_path / "nope.json"), "-o", str(output), "--plain-logs"]) == 1
    assert not output.exists()


def test_logger_overrides_come_from_settings(tmp_path, sample_rows, monkeypatch) -> None:
    logger = logging.getLogger("blog_search.search.storage")
    previous = logger.level
    monkeypatch.setenv("LOG_LEVELS", '{"blog_search.search.storage": "error"}')
    try:
        export = _write_export(tmp_path, sample_rows)
        exit_code = main(["-i", str(export), "-o", str(tmp_path / "i.json"), "--plain-logs"])

        assert exit_code == 0
        assert logger.level == logging.ERROR
    finally:
        logger.setLevel(previous)
