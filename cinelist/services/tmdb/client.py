"""TMDB v3 HTTP client.

Optimized with:
- Persistent httpx.AsyncClient for connection reuse
- Lazy client initialization
"""

from functools import lru_cache
from typing import Any

import httpx

from cinelist.core.config import Settings, get_settings
from cinelist.core.logging import get_logger

logger = get_logger(__name__)


class TMDBError(Exception):
    """A TMDB request failed.

    ``status`` is the HTTP status for non-2xx responses and ``None`` for
    transport failures (timeouts, DNS, connection resets).
    """

    def __init__(self, message: str, *, status: int | None = None, path: str = "", body: str = ""):
        self.status = status
        self.path = path
        self.body = body
        super().__init__(message)


class TMDBClient:
    """Async client for the TMDB endpoints the catalog uses."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = settings.tmdb_base_url.rstrip("/")
        self._api_key = settings.tmdb_api_key
        self._token = settings.tmdb_read_access_token
        self._language = settings.tmdb_language
        self._timeout = settings.tmdb_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not settings.tmdb_configured:
            logger.warning("TMDB credentials not configured, upstream requests will be rejected")

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent HTTP client."""
        if self._client is None:
            headers = {"Accept": "application/json"}
            # Bearer token wins; the v3 key goes in the query string instead
            if self._token:
                headers["Authorization"] = f"Bearer {self._token}"
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout, connect=3.0),
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        query = {k: v for k, v in (params or {}).items() if v is not None}
        if not self._token and self._api_key:
            query["api_key"] = self._api_key

        client = self._get_client()
        try:
            response = await client.get(path, params=query)
        except httpx.HTTPError as e:
            raise TMDBError(f"TMDB request failed: {e}", path=path) from e

        if response.is_error:
            raise TMDBError(
                f"TMDB GET {path} failed: {response.status_code} {response.reason_phrase}",
                status=response.status_code,
                path=path,
                body=response.text,
            )

        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as e:
            raise TMDBError(f"TMDB GET {path} returned invalid JSON", path=path) from e

    async def get_trending(self, media_type: str = "movie", time_window: str = "week") -> dict[str, Any]:
        return await self._get(f"/trending/{media_type}/{time_window}")

    async def search_multi(self, query: str, page: int = 1) -> dict[str, Any]:
        return await self._get("/search/multi", {"query": query, "page": page})

    async def search_keyword(self, query: str) -> dict[str, Any]:
        return await self._get("/search/keyword", {"query": query})

    async def get_movie_details(
        self,
        movie_id: int | str,
        append_to_response: str | None = None,
    ) -> dict[str, Any]:
        return await self._get(
            f"/movie/{movie_id}",
            {"language": self._language, "append_to_response": append_to_response},
        )

    async def get_tv_details(
        self,
        tv_id: int | str,
        append_to_response: str | None = None,
    ) -> dict[str, Any]:
        return await self._get(
            f"/tv/{tv_id}",
            {"language": self._language, "append_to_response": append_to_response},
        )

    async def get_tv_season(self, tv_id: int | str, season_number: int) -> dict[str, Any]:
        return await self._get(
            f"/tv/{tv_id}/season/{season_number}",
            {"language": self._language},
        )

    async def discover_movies(self, options: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._get("/discover/movie", {"language": self._language, **(options or {})})

    async def discover_tv_shows(self, options: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self._get("/discover/tv", {"language": self._language, **(options or {})})


@lru_cache
def get_tmdb_client() -> TMDBClient:
    """Get the process-wide TMDB client (cached)."""
    return TMDBClient(get_settings())
