"""Tests for the artifact acquisition chain."""

from __future__ import annotations

import logging

import httpx
import orjson
import pytest

from blog_search.search.acquisition import (
    ArtifactLoader,
    AssetBindingStrategy,
    HttpStrategy,
    LocalFileStrategy,
    build_default_loader,
)
from blog_search.search.errors import AcquisitionError
from blog_search.search.models import InvertedIndex, LegacyIndex


class FakeAssetResponse:
    def __init__(self, payload, status: int = 200) -> None:
        self.payload = payload
        self.status = status

    async def json(self):
        return self.payload


class FakeBinding:
    def __init__(self, response=None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.paths: list[str] = []

    async def fetch(self, path: str):
        self.paths.append(path)
        if self.exc is not None:
            raise self.exc
        return self.response


class FailingStrategy:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        raise AcquisitionError(self.name, "unavailable")


class StaticStrategy:
    def __init__(self, name: str, payload) -> None:
        self.name = name
        self.payload = payload
        self.calls = 0

    async def fetch(self):
        self.calls += 1
        return self.payload


@pytest.mark.asyncio
class TestAssetBindingStrategy:
    async def test_missing_binding_fails(self) -> None:
        with pytest.raises(AcquisitionError, match="no asset binding"):
            await AssetBindingStrategy(None).fetch()

    async def test_bytes_response_is_decoded(self) -> None:
        binding = FakeBinding(response=b'[{"slug": "a", "h": "x"}]')

        payload = await AssetBindingStrategy(binding).fetch()

        assert payload == [{"slug": "a", "h": "x"}]
        assert binding.paths == ["/search-index.json"]

    async def test_response_object_json_is_awaited(self) -> None:
        binding = FakeBinding(response=FakeAssetResponse({"v": 3}))
        assert await AssetBindingStrategy(binding, asset_path="/idx.json").fetch() == {"v": 3}
        assert binding.paths == ["/idx.json"]

    async def test_non_ok_response_fails(self) -> None:
        binding = FakeBinding(response=FakeAssetResponse({}, status=404))
        with pytest.raises(AcquisitionError, match="HTTP 404"):
            await AssetBindingStrategy(binding).fetch()

    async def test_binding_exception_is_wrapped(self) -> None:
        binding = FakeBinding(exc=RuntimeError("binding offline"))
        with pytest.raises(AcquisitionError, match="binding offline"):
            await AssetBindingStrategy(binding).fetch()

    async def test_unusable_status_fails(self) -> None:
        binding = FakeBinding(response=FakeAssetResponse({}, status="teapot"))
        with pytest.raises(AcquisitionError, match="no usable status"):
            await AssetBindingStrategy(binding).fetch()


@pytest.mark.asyncio
class TestLocalFileStrategy:
    async def test_reads_artifact(self, artifact_file) -> None:
        payload = await LocalFileStrategy(artifact_file).fetch()
        assert payload["v"] == 3

    async def test_missing_file_fails(self, tmp_path) -> None:
        with pytest.raises(AcquisitionError, match="cannot read"):
            await LocalFileStrategy(tmp_path / "missing.json").fetch()

    async def test_invalid_json_fails(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(AcquisitionError, match="invalid JSON"):
            await LocalFileStrategy(path).fetch()


@pytest.mark.asyncio
class TestHttpStrategy:
    async def test_fetches_with_cache_directives(self, v3_artifact) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=orjson.dumps(v3_artifact.to_dict()))

        strategy = HttpStrategy("https://blog.example.com/search-index.json", transport=httpx.MockTransport(handler))
        payload = await strategy.fetch()

        assert payload["N"] == 3
        assert "public" in seen[0].headers["cache-control"]

    async def test_non_200_fails(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        strategy = HttpStrategy("https://blog.example.com/search-index.json", transport=transport)
        with pytest.raises(AcquisitionError, match="HTTP 503"):
            await strategy.fetch()

    async def test_transport_error_fails(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        strategy = HttpStrategy("https://blog.example.com/search-index.json", transport=httpx.MockTransport(handler))
        with pytest.raises(AcquisitionError, match="ConnectTimeout"):
            await strategy.fetch()

    async def test_missing_url_fails(self) -> None:
        with pytest.raises(AcquisitionError, match="no artifact URL"):
            await HttpStrategy(None).fetch()


@pytest.mark.asyncio
class TestArtifactLoader:
    async def test_first_success_wins(self, v3_artifact) -> None:
        first = FailingStrategy("asset-binding")
        second = StaticStrategy("local-file", v3_artifact.to_dict())
        third = StaticStrategy("http", [])

        artifact = await ArtifactLoader([first, second, third]).load()

        assert isinstance(artifact, InvertedIndex)
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)

    async def test_failures_are_logged_with_strategy_name(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="blog_search.search.acquisition"):
            artifact = await ArtifactLoader([FailingStrategy("asset-binding"), FailingStrategy("http")]).load()

        assert isinstance(artifact, LegacyIndex)
        assert artifact.doc_count == 0
        warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
        strategies = [getattr(record, "strategy", None) for record in warnings]
        assert strategies == ["asset-binding", "http"]
        assert any("serving an empty corpus" in record.getMessage() for record in caplog.records)

    async def test_malformed_payload_falls_through(self) -> None:
        good = StaticStrategy("http", [{"slug": "a", "h": "hello"}])
        artifact = await ArtifactLoader([StaticStrategy("local-file", {"v": 99}), good]).load()

        assert isinstance(artifact, LegacyIndex)
        assert good.calls == 1

    async def test_structurally_invalid_artifact_falls_through(self, v3_artifact) -> None:
        payload = orjson.loads(orjson.dumps(v3_artifact.to_dict()))
        payload["postings"][0] = ["0", 1]

        artifact = await ArtifactLoader([StaticStrategy("local-file", payload)]).load()

        assert isinstance(artifact, LegacyIndex)
        assert artifact.doc_count == 0

    async def test_unexpected_strategy_error_falls_through(self, caplog, v3_artifact) -> None:
        class BrokenStrategy:
            name = "asset-binding"

            async def fetch(self):
                raise RuntimeError("binding misbehaved")

        fallback = StaticStrategy("http", v3_artifact.to_dict())
        with caplog.at_level(logging.WARNING, logger="blog_search.search.acquisition"):
            artifact = await ArtifactLoader([BrokenStrategy(), fallback]).load()

        assert artifact.kind == "v3"
        assert fallback.calls == 1
        [warning] = [record for record in caplog.records if record.levelno == logging.WARNING]
        assert warning.strategy == "asset-binding"
        assert "RuntimeError: binding misbehaved" in warning.getMessage()

    async def test_default_chain_uses_local_file_without_binding(self, artifact_file) -> None:
        def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be reached
            raise AssertionError("HTTP fallback should not run")

        loader = build_default_loader(
            binding=None,
            artifact_path=artifact_file,
            artifact_url="https://blog.example.com/search-index.json",
            http_timeout=1.0,
            transport=httpx.MockTransport(handler),
        )

        artifact = await loader.load()

        assert [strategy.name for strategy in loader.strategies] == ["asset-binding", "local-file", "http"]
        assert artifact.kind == "v3"

    async def test_default_chain_falls_back_to_http(self, tmp_path, v3_artifact) -> None:
        body = orjson.dumps(v3_artifact.to_dict())
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body))
        loader = build_default_loader(
            binding=None,
            artifact_path=tmp_path / "absent.json",
            artifact_url="https://blog.example.com/search-index.json",
            http_timeout=1.0,
            transport=transport,
        )

        artifact = await loader.load()

        assert artifact.kind == "v3"
        assert artifact.doc_count == 3
