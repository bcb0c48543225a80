"""Main ASGI application entry point.

Routes:
    GET /api/search?q=...  ranked post summaries (always a JSON array)
    GET /health            artifact status
    GET /metrics           Prometheus exposition

Usage:
    python -m blog_search.app
"""

from __future__ import annotations

import logging

import httpx
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
import uvicorn

from blog_search.config import Settings
from blog_search.observability.logging import configure_logging
from blog_search.observability.metrics import get_metrics, get_metrics_content_type
from blog_search.observability.tracing import TraceContextMiddleware, init_tracing
from blog_search.search.acquisition import AssetBinding, build_default_loader
from blog_search.search.bm25_engine import BM25SearchEngine
from blog_search.search.cache import ArtifactCache
from blog_search.service_layer.search_service import SearchService


logger = logging.getLogger(__name__)


def build_search_service(
    settings: Settings,
    *,
    asset_binding: AssetBinding | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> SearchService:
    """Wire the acquisition chain, cache and engine described by ``settings``."""

    loader = build_default_loader(
        binding=asset_binding,
        asset_path=settings.artifact_asset_path,
        artifact_path=settings.artifact_path,
        artifact_url=settings.get_artifact_url(),
        http_timeout=settings.http_timeout,
        transport=transport,
    )
    return SearchService(
        loader=loader,
        cache=ArtifactCache(ttl_seconds=settings.cache_ttl_seconds),
        engine=BM25SearchEngine(k1=settings.bm25_k1, b=settings.bm25_b, limit=settings.max_results),
    )


def create_app(
    settings: Settings | None = None,
    *,
    service: SearchService | None = None,
    asset_binding: AssetBinding | None = None,
) -> Starlette:
    """Create the ASGI application.

    Args:
        settings: Configuration (defaults to environment-driven ``Settings()``)
        service: Pre-built search service, mainly for tests
        asset_binding: Platform static-asset interface, when the host provides one
    """
    settings = settings or Settings()
    search_service = service or build_search_service(settings, asset_binding=asset_binding)
    cache_headers = {"Cache-Control": settings.search_cache_control}

    async def search_endpoint(request: Request) -> JSONResponse:
        results = await search_service.search(request.query_params.get("q"))
        return JSONResponse([result.to_dict() for result in results], headers=cache_headers)

    async def health_check(request: Request) -> JSONResponse:
        await search_service.get_artifact()
        status = search_service.status()
        return JSONResponse(
            {
                "status": "healthy" if status["documents"] else "degraded",
                **status,
            }
        )

    async def metrics_endpoint(request: Request) -> Response:
        return Response(get_metrics(), media_type=get_metrics_content_type())

    app = Starlette(
        routes=[
            Route("/api/search", search_endpoint, methods=["GET"]),
            Route("/health", health_check, methods=["GET"]),
            Route("/metrics", metrics_endpoint, methods=["GET"]),
        ],
        middleware=[Middleware(TraceContextMiddleware)],
    )
    app.state.search_service = search_service
    app.state.settings = settings
    return app


def main() -> None:
    """Run the search API with uvicorn."""
    settings = Settings()
    configure_logging(
        settings.log_level,
        json_output=settings.log_json,
        logger_levels=settings.log_levels,
        access_log=settings.access_log,
    )
    init_tracing()

    logger.info("Starting blog search on %s:%d", settings.host, settings.port)
    logger.info("Artifact path: %s", settings.artifact_path)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Don't let uvicorn override our logging config
    )


if __name__ == "__main__":
    main()
