"""Centralized configuration for blog-search using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All environment variables are validated at startup with proper types.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Artifact location
    artifact_path: Path = Field(
        default=Path("public/search-index.json"),
        description="Filesystem path the builder writes and local development reads",
    )
    artifact_url: str = Field(
        default="",
        description="Absolute URL of the artifact for the HTTP fallback; derived from SITE_ORIGIN when empty",
    )
    site_origin: str = Field(default="", description="Same-origin base URL, e.g. https://example.com")
    artifact_asset_path: str = Field(
        default="/search-index.json",
        description="Path requested from the platform asset binding",
    )

    # HTTP/Request settings
    http_timeout: float = Field(default=10.0, gt=0, description="Artifact HTTP fetch timeout in seconds")

    # Query engine
    cache_ttl_seconds: float = Field(default=300.0, gt=0, description="Lifetime of the cached artifact")
    max_results: int = Field(default=50, ge=1, description="Maximum results per search")
    bm25_k1: float = Field(default=1.2, gt=0, description="BM25 term frequency saturation")
    bm25_b: float = Field(default=0.75, ge=0.0, le=1.0, description="BM25 length normalization")

    # Response caching policy
    search_cache_control: str = Field(
        default="public, max-age=0, s-maxage=600, stale-while-revalidate=86400",
        description="Cache-Control header sent with search responses",
    )

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8787, ge=1, le=65535, description="Server port")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    log_levels: dict[str, str] = Field(
        default_factory=dict,
        description='Per-logger level overrides as JSON, e.g. {"blog_search.search.acquisition": "debug"}',
    )
    access_log: bool = Field(default=False, description="Keep uvicorn access lines in the log stream")

    @field_validator("site_origin", "artifact_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("artifact_asset_path")
    @classmethod
    def _ensure_leading_slash(cls, value: str) -> str:
        value = value.strip()
        return value if value.startswith("/") else f"/{value}"

    def get_artifact_url(self) -> str | None:
        """Return the HTTP fallback URL, or None when neither setting is present."""
        if self.artifact_url:
            return self.artifact_url
        if self.site_origin:
            return f"{self.site_origin}{self.artifact_asset_path}"
        return None
