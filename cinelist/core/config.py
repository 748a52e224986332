"""Application configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults for development.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========== Cache (Upstash Redis) ==========
    upstash_redis_rest_url: str = Field(default="", description="Upstash Redis REST URL")
    upstash_redis_rest_token: str = Field(default="", description="Upstash Redis REST Token")

    # ========== TMDB ==========
    tmdb_api_key: str = Field(default="", description="TMDB v3 API key (query param auth)")
    tmdb_read_access_token: str = Field(default="", description="TMDB read access token (bearer auth)")
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3")
    tmdb_language: str = "en-US"
    tmdb_timeout_seconds: float = Field(default=10.0, gt=0, le=60)

    # ========== Rate Limiting ==========
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_search_max_requests: int = Field(default=30, ge=1)
    rate_limit_search_window_ms: int = Field(default=60_000, ge=1000)
    rate_limit_discover_max_requests: int = Field(default=40, ge=1)
    rate_limit_discover_window_ms: int = Field(default=60_000, ge=1000)
    rate_limit_lists_max_requests: int = Field(default=20, ge=1)
    rate_limit_lists_window_ms: int = Field(default=60_000, ge=1000)

    # ========== Admin ==========
    cache_admin_token: str = Field(
        default="",
        description="Shared secret for cache invalidation endpoints (disabled when empty)",
    )

    # ========== CORS ==========
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="CORS_ORIGINS",
        description="Comma-separated CORS origins",
    )

    # ========== Application ==========
    app_name: str = "Cinelist API"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # ========== Computed Properties ==========
    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    @computed_field
    @property
    def redis_available(self) -> bool:
        """Check if Redis credentials are configured."""
        return bool(self.upstash_redis_rest_url.strip() and self.upstash_redis_rest_token.strip())

    @computed_field
    @property
    def redis_partially_configured(self) -> bool:
        """Exactly one of URL/token is set - almost certainly a deployment mistake."""
        return bool(self.upstash_redis_rest_url.strip()) != bool(self.upstash_redis_rest_token.strip())

    @computed_field
    @property
    def tmdb_configured(self) -> bool:
        """Check if any TMDB credential is configured."""
        return bool(self.tmdb_read_access_token or self.tmdb_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
