"""Cache administration endpoints.

Force-refresh cached TMDB data without waiting for TTL expiry, e.g. from an
admin action or a webhook. Disabled unless ``CACHE_ADMIN_TOKEN`` is set.
Shares the lists mutation rate limit.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Path

from cinelist.api.deps import AdminToken, ListsRateLimit, TMDBService
from cinelist.api.schemas import ErrorResponse, InvalidateTagsRequest, InvalidationResponse
from cinelist.core.logging import get_logger
from cinelist.services.cache import CacheManager, get_cache_manager

logger = get_logger(__name__)
router = APIRouter(prefix="/cache/invalidate", tags=["Cache"])

ADMIN_RESPONSES: dict[int | str, dict[str, Any]] = {
    403: {"model": ErrorResponse, "description": "Invalid admin token"},
    404: {"model": ErrorResponse, "description": "Cache administration disabled"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
}


@router.post("/movie/{movie_id}", response_model=InvalidationResponse, responses=ADMIN_RESPONSES)
async def invalidate_movie(
    _admin: AdminToken,
    _limit: ListsRateLimit,
    tmdb: TMDBService,
    movie_id: int = Path(..., ge=1),
) -> InvalidationResponse:
    """Drop cached details for one movie and the shared movie details tag."""
    count = await tmdb.invalidate_movie_cache(movie_id)
    logger.info("Movie cache invalidated", movie_id=movie_id, keys=count)
    return InvalidationResponse(invalidated=count)


@router.post("/tv/{tv_id}", response_model=InvalidationResponse, responses=ADMIN_RESPONSES)
async def invalidate_tv(
    _admin: AdminToken,
    _limit: ListsRateLimit,
    tmdb: TMDBService,
    tv_id: int = Path(..., ge=1),
) -> InvalidationResponse:
    """Drop cached details and seasons for one show and the shared TV tag."""
    count = await tmdb.invalidate_tv_cache(tv_id)
    logger.info("TV cache invalidated", tv_id=tv_id, keys=count)
    return InvalidationResponse(invalidated=count)


@router.post("/trending", response_model=InvalidationResponse, responses=ADMIN_RESPONSES)
async def invalidate_trending(
    _admin: AdminToken,
    _limit: ListsRateLimit,
    tmdb: TMDBService,
) -> InvalidationResponse:
    count = await tmdb.invalidate_trending_cache()
    logger.info("Trending cache invalidated", keys=count)
    return InvalidationResponse(invalidated=count)


@router.post("/discover", response_model=InvalidationResponse, responses=ADMIN_RESPONSES)
async def invalidate_discover(
    _admin: AdminToken,
    _limit: ListsRateLimit,
    tmdb: TMDBService,
) -> InvalidationResponse:
    count = await tmdb.invalidate_discover_cache()
    logger.info("Discover cache invalidated", keys=count)
    return InvalidationResponse(invalidated=count)


@router.post("/tags", response_model=InvalidationResponse, responses=ADMIN_RESPONSES)
async def invalidate_tags(
    body: InvalidateTagsRequest,
    _admin: AdminToken,
    _limit: ListsRateLimit,
    cache: Annotated[CacheManager, Depends(get_cache_manager)],
) -> InvalidationResponse:
    """Invalidate arbitrary tags. Tags do not cascade; list every family to purge."""
    count = await cache.invalidate_tags(body.tags)
    logger.info("Cache tags invalidated", tags=body.tags, keys=count)
    return InvalidationResponse(invalidated=count)
