"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================
# Discover Schemas
# ============================================================

class YearRange(BaseModel):
    """Inclusive release year bounds."""

    min: int | None = Field(default=None, ge=1870, le=2100)
    max: int | None = Field(default=None, ge=1870, le=2100)


class MediaFilter(BaseModel):
    """Library filter model sent by the discovery page as JSON."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    genres: list[int] = Field(default_factory=list, description="TMDB genre IDs")
    languages: list[str] = Field(default_factory=list, description="ISO 639-1 codes")
    min_rating: float | None = Field(default=None, alias="minRating", ge=0, le=10)
    year_range: YearRange | None = Field(default=None, alias="yearRange")


# ============================================================
# Catalog Schemas
# ============================================================

class PagedResults(BaseModel):
    """Schema for paginated TMDB listings."""

    results: list[dict[str, Any]]
    page: int
    total_pages: int
    total_results: int

    @classmethod
    def from_tmdb(
        cls,
        data: dict[str, Any],
        page: int = 1,
        results: list[dict[str, Any]] | None = None,
    ) -> "PagedResults":
        return cls(
            results=results if results is not None else data.get("results") or [],
            page=data.get("page") or page,
            total_pages=data.get("total_pages") or 1,
            total_results=data.get("total_results") or 0,
        )


# ============================================================
# Cache Admin Schemas
# ============================================================

class InvalidateTagsRequest(BaseModel):
    """Schema for explicit tag invalidation."""

    tags: list[str] = Field(..., min_length=1, max_length=50)


class InvalidationResponse(BaseModel):
    """Schema for cache invalidation results."""

    success: bool = True
    invalidated: int = Field(description="Number of cache keys removed")


# ============================================================
# Common Response Schemas
# ============================================================

class ErrorResponse(BaseModel):
    """Schema for error responses."""

    error: dict[str, Any] = Field(
        ...,
        json_schema_extra={"example": {"message": "Error description", "details": {}}},
    )


# ============================================================
# Health Check Schemas
# ============================================================

class ServiceHealth(BaseModel):
    """Schema for individual service health."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy|degraded)$")
    latency_ms: float | None = None
    details: dict[str, Any] | None = None


class HealthResponse(BaseModel):
    """Schema for health check response."""

    status: str = Field(..., pattern=r"^(healthy|unhealthy|degraded)$")
    timestamp: datetime
    version: str
    services: dict[str, ServiceHealth]
