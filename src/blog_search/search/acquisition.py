"""Ordered acquisition strategies for the search artifact.

The loader walks a fixed list of named strategies (platform asset binding,
local file, same-origin HTTP) and returns the first artifact that parses.
Every failure is logged with the strategy name before falling through; when
all strategies fail the corpus is treated as empty.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import inspect
import logging
from pathlib import Path
from typing import Any, Protocol

import anyio
import httpx
import orjson

from blog_search.observability.metrics import ACQUISITION_FAILURES, ACQUISITION_SUCCESSES
from blog_search.observability.tracing import create_span
from blog_search.search.errors import AcquisitionError, ArtifactFormatError
from blog_search.search.models import Artifact, LegacyIndex, parse_artifact


logger = logging.getLogger(__name__)

ARTIFACT_ASSET_PATH = "/search-index.json"
ARTIFACT_REQUEST_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "public, max-age=600, s-maxage=600",
}


def _decode(strategy: str, raw: bytes | str) -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise AcquisitionError(strategy, f"invalid JSON: {exc}") from exc


class AcquisitionStrategy(Protocol):
    """A named way of fetching the raw artifact payload."""

    name: str

    async def fetch(self) -> Any:  # pragma: no cover - interface definition
        """Return the decoded JSON payload or raise ``AcquisitionError``."""
        ...


class AssetBinding(Protocol):
    """Static-asset interface exposed by a hosting platform."""

    async def fetch(self, path: str) -> Any:  # pragma: no cover - interface definition
        ...


class AssetBindingStrategy:
    """Fetch through a platform asset binding when one is configured."""

    name = "asset-binding"

    def __init__(self, binding: AssetBinding | None, *, asset_path: str = ARTIFACT_ASSET_PATH) -> None:
        self.binding = binding
        self.asset_path = asset_path

    async def fetch(self) -> Any:
        if self.binding is None:
            raise AcquisitionError(self.name, "no asset binding configured")
        try:
            response = await self.binding.fetch(self.asset_path)
        except Exception as exc:  # platform bindings raise arbitrary error types
            raise AcquisitionError(self.name, str(exc) or type(exc).__name__) from exc

        if isinstance(response, (bytes, bytearray, str)):
            return _decode(self.name, response)
        if isinstance(response, (Mapping, list)):
            return response

        status = getattr(response, "status_code", getattr(response, "status", 200))
        try:
            status_code = int(status)
        except (TypeError, ValueError) as exc:
            raise AcquisitionError(self.name, f"asset response has no usable status: {status!r}") from exc
        if not 200 <= status_code < 300:
            raise AcquisitionError(self.name, f"asset responded with HTTP {status}")
        json_method = getattr(response, "json", None)
        if json_method is None:
            raise AcquisitionError(self.name, f"unsupported asset response {type(response).__name__}")
        try:
            payload = json_method()
            if inspect.isawaitable(payload):
                payload = await payload
        except ValueError as exc:
            raise AcquisitionError(self.name, f"invalid JSON: {exc}") from exc
        return payload


class LocalFileStrategy:
    """Read the artifact from the local filesystem (development builds)."""

    name = "local-file"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    async def fetch(self) -> Any:
        try:
            raw = await anyio.Path(self.path).read_bytes()
        except OSError as exc:
            raise AcquisitionError(self.name, f"cannot read {self.path}: {exc.strerror or exc}") from exc
        return _decode(self.name, raw)


class HttpStrategy:
    """Fetch the artifact over same-origin HTTP."""

    name = "http"

    def __init__(
        self,
        url: str | None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> Any:
        if not self.url:
            raise AcquisitionError(self.name, "no artifact URL configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url, headers=ARTIFACT_REQUEST_HEADERS)
        except httpx.HTTPError as exc:
            raise AcquisitionError(self.name, f"{type(exc).__name__}: {exc}") from exc
        if response.status_code != httpx.codes.OK:
            raise AcquisitionError(self.name, f"{self.url} responded with HTTP {response.status_code}")
        return _decode(self.name, response.content)


class ArtifactLoader:
    """Try each acquisition strategy in order; first parsed artifact wins."""

    def __init__(self, strategies: Sequence[AcquisitionStrategy]) -> None:
        self.strategies = list(strategies)

    async def load(self) -> Artifact:
        with create_span("search.artifact.acquire") as span:
            for strategy in self.strategies:
                try:
                    artifact = parse_artifact(await strategy.fetch())
                except (AcquisitionError, ArtifactFormatError) as exc:
                    self._record_failure(strategy.name, exc)
                    continue
                except Exception as exc:
                    self._record_failure(strategy.name, exc, unexpected=True)
                    continue
                ACQUISITION_SUCCESSES.labels(strategy=strategy.name).inc()
                span.set_attribute("search.artifact.strategy", strategy.name)
                span.set_attribute("search.artifact.kind", artifact.kind)
                logger.info(
                    "Loaded %s search artifact via %s (%d documents)",
                    artifact.kind,
                    strategy.name,
                    artifact.doc_count,
                )
                return artifact

            span.set_attribute("search.artifact.strategy", "none")
            logger.error(
                "All %d search artifact acquisition strategies failed; serving an empty corpus",
                len(self.strategies),
            )
            return LegacyIndex()

    @staticmethod
    def _record_failure(name: str, exc: Exception, *, unexpected: bool = False) -> None:
        ACQUISITION_FAILURES.labels(strategy=name).inc()
        reason = str(exc) or type(exc).__name__
        logger.warning(
            "Search artifact acquisition via %s failed: %s",
            name,
            f"{type(exc).__name__}: {reason}" if unexpected else reason,
            exc_info=unexpected,
            extra={"strategy": name},
        )


def build_default_loader(
    *,
    binding: AssetBinding | None,
    asset_path: str = ARTIFACT_ASSET_PATH,
    artifact_path: str | Path,
    artifact_url: str | None,
    http_timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ArtifactLoader:
    """Return the standard asset-binding, local-file, HTTP chain."""

    return ArtifactLoader(
        [
            AssetBindingStrategy(binding, asset_path=asset_path),
            LocalFileStrategy(artifact_path),
            HttpStrategy(artifact_url, timeout=http_timeout, transport=transport),
        ]
    )
