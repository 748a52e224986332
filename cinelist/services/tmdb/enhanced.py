"""Read-through cached view of the TMDB client.

Every method mirrors the matching ``TMDBClient`` call: look up a
deterministic key, return the cached document on a hit, otherwise fetch
upstream and store the result with a per-domain TTL and tag set. Upstream
errors propagate unchanged and are never cached.
"""

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

from cinelist.core.logging import get_logger
from cinelist.services.cache import (
    KEY_PREFIX_TMDB,
    TTL_DETAILS,
    TTL_DISCOVER,
    TTL_SEARCH,
    TTL_SEASON,
    TTL_TRENDING,
    CacheManager,
    get_cache_manager,
)
from cinelist.services.tmdb import keys
from cinelist.services.tmdb.client import TMDBClient, get_tmdb_client

logger = get_logger(__name__)


class TMDBEnhanced:
    """TMDB client with Redis caching and tag-based invalidation."""

    def __init__(self, client: TMDBClient, cache: CacheManager) -> None:
        self._client = client
        self._cache = cache

    async def _read_through(
        self,
        label: str,
        cache_key: str,
        fetch: Callable[[], Awaitable[Any]],
        ttl: int,
        tags: list[str],
        **context: Any,
    ) -> Any:
        cached = await self._cache.get(cache_key, KEY_PREFIX_TMDB)
        if cached is not None:
            logger.debug(f"TMDB cache hit: {label}", **context)
            return cached

        logger.debug(f"TMDB cache miss: {label}", **context)
        try:
            result = await fetch()
        except Exception as e:
            logger.error(f"Error fetching {label} from TMDB", error=str(e), **context)
            raise

        await self._cache.set(cache_key, result, ttl, KEY_PREFIX_TMDB, tags)
        return result

    # ========== Catalog lookups ==========

    async def get_trending(self, media_type: str = "movie", time_window: str = "week") -> dict[str, Any]:
        """Get trending movies or TV shows."""
        return await self._read_through(
            "trending",
            keys.trending_key(media_type, time_window),
            lambda: self._client.get_trending(media_type, time_window),
            TTL_TRENDING,
            ["trending", f"trending:{media_type}"],
            media_type=media_type,
            time_window=time_window,
        )

    async def search_multi(self, query: str, page: int = 1) -> dict[str, Any]:
        """Search movies, TV shows and people."""
        return await self._read_through(
            "search",
            keys.search_key(query, page),
            lambda: self._client.search_multi(query, page),
            TTL_SEARCH,
            ["search", f"search:{keys.normalize_query(query)}"],
            query=query,
            page=page,
        )

    async def search_keyword(self, query: str) -> dict[str, Any]:
        return await self._read_through(
            "keyword search",
            keys.keyword_search_key(query),
            lambda: self._client.search_keyword(query),
            TTL_SEARCH,
            ["search", "keywords"],
            query=query,
        )

    async def get_movie_details(
        self,
        movie_id: int | str,
        append_to_response: str | None = None,
    ) -> dict[str, Any]:
        return await self._read_through(
            "movie details",
            keys.movie_details_key(movie_id, append_to_response),
            lambda: self._client.get_movie_details(movie_id, append_to_response),
            TTL_DETAILS,
            ["movie", f"movie:{movie_id}"],
            id=movie_id,
        )

    async def get_tv_details(
        self,
        tv_id: int | str,
        append_to_response: str | None = None,
    ) -> dict[str, Any]:
        return await self._read_through(
            "TV details",
            keys.tv_details_key(tv_id, append_to_response),
            lambda: self._client.get_tv_details(tv_id, append_to_response),
            TTL_DETAILS,
            ["tv", f"tv:{tv_id}"],
            id=tv_id,
        )

    async def get_tv_season(self, tv_id: int | str, season_number: int) -> dict[str, Any]:
        return await self._read_through(
            "TV season",
            keys.tv_season_key(tv_id, season_number),
            lambda: self._client.get_tv_season(tv_id, season_number),
            TTL_SEASON,
            ["tv", f"tv:{tv_id}", f"tv:{tv_id}:seasons"],
            id=tv_id,
            season_number=season_number,
        )

    async def discover_movies(self, options: dict[str, Any] | None = None) -> dict[str, Any]:
        options = {k: v for k, v in (options or {}).items() if v is not None}
        return await self._read_through(
            "discover movies",
            keys.discover_key("movies", options),
            lambda: self._client.discover_movies(options),
            TTL_DISCOVER,
            ["discover", "discover:movies"],
            options=options,
        )

    async def discover_tv_shows(self, options: dict[str, Any] | None = None) -> dict[str, Any]:
        options = {k: v for k, v in (options or {}).items() if v is not None}
        return await self._read_through(
            "discover TV",
            keys.discover_key("tv", options),
            lambda: self._client.discover_tv_shows(options),
            TTL_DISCOVER,
            ["discover", "discover:tv"],
            options=options,
        )

    # ========== Invalidation ==========

    async def invalidate_movie_cache(self, movie_id: int | str) -> int:
        """Drop cached details for one movie along with the shared ``movie`` tag."""
        return await self._cache.invalidate_tags([f"movie:{movie_id}", "movie"])

    async def invalidate_tv_cache(self, tv_id: int | str) -> int:
        """Drop cached details and seasons for one show along with the ``tv`` tag."""
        return await self._cache.invalidate_tags([f"tv:{tv_id}", "tv", f"tv:{tv_id}:seasons"])

    async def invalidate_trending_cache(self) -> int:
        return await self._cache.invalidate_tag("trending")

    async def invalidate_discover_cache(self) -> int:
        return await self._cache.invalidate_tags(["discover", "discover:movies", "discover:tv"])


@lru_cache
def get_tmdb_enhanced() -> TMDBEnhanced:
    """Get the process-wide cached TMDB client."""
    return TMDBEnhanced(get_tmdb_client(), get_cache_manager())
