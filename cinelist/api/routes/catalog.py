"""Catalog API endpoints backed by the cached TMDB client."""

import json
from collections.abc import Awaitable
from datetime import date
from typing import Any, Literal, TypeVar

from fastapi import APIRouter, HTTPException, Path, Query, status
from pydantic import ValidationError as PydanticValidationError

from cinelist.api.deps import DiscoverRateLimit, SearchRateLimit, TMDBService
from cinelist.api.schemas import ErrorResponse, MediaFilter, PagedResults
from cinelist.core.exceptions import UpstreamError
from cinelist.core.logging import get_logger
from cinelist.services.tmdb import TMDBError

logger = get_logger(__name__)
router = APIRouter(tags=["Catalog"])

T = TypeVar("T")

SortOption = Literal["popularity", "rating", "release-date", "title", "date-added"]
SortDirection = Literal["asc", "desc"]

# Year slider lower bound; selecting it means "no lower bound"
MIN_FILTER_YEAR = 1970
# TMDB discover accepts a single original language
PREFERRED_LANGUAGES = ("en", "es", "fr", "de", "it", "pt", "ja", "ko", "zh")

RATE_LIMITED_RESPONSES: dict[int | str, dict[str, Any]] = {
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
}


async def _upstream(call: Awaitable[T], **context: Any) -> T:
    """Await a TMDB call, translating provider failures into a generic API error."""
    try:
        return await call
    except TMDBError as e:
        logger.error(
            "TMDB request failed",
            upstream_status=e.status,
            upstream_path=e.path,
            error=str(e),
            **context,
        )
        raise UpstreamError(e.status) from e


def is_movie(item: dict[str, Any]) -> bool:
    if item.get("media_type") == "movie":
        return True
    return "title" in item and "name" not in item


def is_tv_show(item: dict[str, Any]) -> bool:
    if item.get("media_type") == "tv":
        return True
    return "name" in item and "title" not in item


def build_discover_options(
    filters: MediaFilter,
    sort_option: str,
    sort_direction: str,
    is_movie_type: bool,
    current_year: int | None = None,
) -> dict[str, Any]:
    """Translate the library filter model into TMDB discover query options."""
    if current_year is None:
        current_year = date.today().year

    sort_map = {
        "popularity": "popularity.desc",
        "rating": "vote_average.desc",
        "release-date": "primary_release_date.desc" if is_movie_type else "first_air_date.desc",
        "title": "title.asc" if is_movie_type else "name.asc",
        # TMDB cannot sort by list insertion time
        "date-added": "popularity.desc",
    }
    sort_by = sort_map.get(sort_option, "popularity.desc")
    if sort_direction == "asc" and sort_by.endswith(".desc"):
        sort_by = sort_by.removesuffix(".desc") + ".asc"
    elif sort_direction == "desc" and sort_by.endswith(".asc"):
        sort_by = sort_by.removesuffix(".asc") + ".desc"

    options: dict[str, Any] = {"page": 1, "sort_by": sort_by}

    if filters.genres:
        options["with_genres"] = ",".join(str(g) for g in filters.genres)

    if filters.languages:
        preferred = next((lang for lang in filters.languages if lang in PREFERRED_LANGUAGES), None)
        options["with_original_language"] = preferred or filters.languages[0]

    if filters.min_rating is not None:
        options["vote_average.gte"] = filters.min_rating

    date_field = "primary_release_date" if is_movie_type else "first_air_date"
    if filters.year_range:
        low, high = filters.year_range.min, filters.year_range.max
        if low is not None and high is not None and low == high:
            options["primary_release_year" if is_movie_type else "first_air_date_year"] = low
        else:
            if low is not None and low != MIN_FILTER_YEAR:
                options[f"{date_field}.gte"] = f"{low}-01-01"
            if high is not None and high < current_year:
                options[f"{date_field}.lte"] = f"{high}-12-31"
            elif high is None and low is not None:
                options[f"{date_field}.lte"] = f"{current_year}-12-31"

    return options


@router.get(
    "/search",
    response_model=PagedResults,
    summary="Search movies, TV shows and people",
    responses=RATE_LIMITED_RESPONSES,
)
async def search(
    tmdb: TMDBService,
    _limit: SearchRateLimit,
    q: str | None = Query(default=None, max_length=200),
    page: int = Query(default=1, ge=1, le=500),
) -> PagedResults:
    """Multi search across movies, TV shows and people (cached 15 minutes)."""
    query = (q or "").strip()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Query parameter "q" is required',
        )

    data = await _upstream(tmdb.search_multi(query, page), query=query, page=page)
    return PagedResults.from_tmdb(data, page)


@router.get(
    "/search/keyword",
    summary="Search TMDB keywords",
    responses=RATE_LIMITED_RESPONSES,
)
async def search_keyword(
    tmdb: TMDBService,
    _limit: SearchRateLimit,
    q: str | None = Query(default=None, max_length=200),
) -> dict[str, Any]:
    query = (q or "").strip()
    if not query:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Query parameter "q" is required',
        )
    return await _upstream(tmdb.search_keyword(query), query=query)


@router.get(
    "/discover",
    response_model=PagedResults,
    summary="Discover titles by filters and sort order",
    responses=RATE_LIMITED_RESPONSES,
)
async def discover(
    tmdb: TMDBService,
    _limit: DiscoverRateLimit,
    media_type: str | None = Query(default=None, alias="type"),
    page: int = Query(default=1),
    filters: str | None = Query(default=None, description="JSON-encoded MediaFilter"),
    sort_option: SortOption = Query(default="popularity", alias="sortOption"),
    sort_direction: SortDirection = Query(default="desc", alias="sortDirection"),
) -> PagedResults:
    """
    Discover movies or TV shows.

    The ``filters`` parameter carries the discovery page's filter state as
    JSON (genres, languages, minRating, yearRange).
    """
    if media_type not in ("movie", "tv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid type. Must be "movie" or "tv"',
        )
    if page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid page number",
        )

    try:
        media_filter = MediaFilter.model_validate(json.loads(filters)) if filters else MediaFilter()
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid filters",
        ) from e

    is_movie_type = media_type == "movie"
    options = build_discover_options(media_filter, sort_option, sort_direction, is_movie_type)
    options["page"] = page

    if is_movie_type:
        data = await _upstream(tmdb.discover_movies(options), type=media_type)
        items = [item for item in data.get("results") or [] if is_movie(item)]
    else:
        data = await _upstream(tmdb.discover_tv_shows(options), type=media_type)
        items = [item for item in data.get("results") or [] if is_tv_show(item)]

    return PagedResults.from_tmdb(data, page, results=items)


@router.get("/trending/{media_type}/{time_window}", summary="Trending titles")
async def trending(
    tmdb: TMDBService,
    media_type: Literal["movie", "tv"],
    time_window: Literal["day", "week"],
) -> dict[str, Any]:
    return await _upstream(
        tmdb.get_trending(media_type, time_window),
        media_type=media_type,
        time_window=time_window,
    )


@router.get("/movie/{movie_id}", summary="Movie details")
async def movie_details(
    tmdb: TMDBService,
    movie_id: int = Path(..., ge=1),
    append_to_response: str | None = Query(default=None, max_length=200),
) -> dict[str, Any]:
    return await _upstream(
        tmdb.get_movie_details(movie_id, append_to_response),
        movie_id=movie_id,
    )


@router.get("/tv/{tv_id}", summary="TV show details")
async def tv_details(
    tmdb: TMDBService,
    tv_id: int = Path(..., ge=1),
    append_to_response: str | None = Query(default=None, max_length=200),
) -> dict[str, Any]:
    return await _upstream(tmdb.get_tv_details(tv_id, append_to_response), tv_id=tv_id)


@router.get("/tv/{tv_id}/season/{season_number}", summary="TV season details")
async def tv_season(
    tmdb: TMDBService,
    tv_id: int = Path(..., ge=1),
    season_number: int = Path(..., ge=0),
) -> dict[str, Any]:
    return await _upstream(
        tmdb.get_tv_season(tv_id, season_number),
        tv_id=tv_id,
        season_number=season_number,
    )
