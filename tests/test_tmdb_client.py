"""Tests for the TMDB HTTP client using httpx.MockTransport."""

import httpx
import pytest

from cinelist.core.config import Settings
from cinelist.services.tmdb import TMDBClient, TMDBError

pytestmark = pytest.mark.asyncio


def _client(handler, api_key: str = "key123", token: str = "") -> TMDBClient:
    settings = Settings(tmdb_api_key=api_key, tmdb_read_access_token=token)
    return TMDBClient(settings, transport=httpx.MockTransport(handler))


def _recorder(payload: dict | None = None, status_code: int = 200):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else {"ok": True})

    return seen, handler


class TestAuth:

    async def test_api_key_in_query_without_token(self):
        seen, handler = _recorder()
        client = _client(handler)
        await client.get_trending("movie", "week")
        await client.close()

        request = seen[0]
        assert request.url.path == "/3/trending/movie/week"
        assert request.url.params["api_key"] == "key123"
        assert "authorization" not in request.headers

    async def test_bearer_token_preferred(self):
        seen, handler = _recorder()
        client = _client(handler, token="bearer-tok")
        await client.search_keyword("heist")
        await client.close()

        request = seen[0]
        assert request.headers["authorization"] == "Bearer bearer-tok"
        assert "api_key" not in request.url.params


class TestRequests:

    async def test_search_params(self):
        seen, handler = _recorder()
        client = _client(handler)
        await client.search_multi("dune", 3)
        await client.close()

        params = seen[0].url.params
        assert seen[0].url.path == "/3/search/multi"
        assert params["query"] == "dune"
        assert params["page"] == "3"

    async def test_details_send_language_and_skip_empty_append(self):
        seen, handler = _recorder()
        client = _client(handler)
        await client.get_movie_details(550)
        await client.get_tv_details(1399, "credits")
        await client.close()

        assert seen[0].url.params["language"] == "en-US"
        assert "append_to_response" not in seen[0].url.params
        assert seen[1].url.path == "/3/tv/1399"
        assert seen[1].url.params["append_to_response"] == "credits"

    async def test_season_path(self):
        seen, handler = _recorder()
        client = _client(handler)
        await client.get_tv_season(1399, 2)
        await client.close()
        assert seen[0].url.path == "/3/tv/1399/season/2"

    async def test_discover_passes_options(self):
        seen, handler = _recorder()
        client = _client(handler)
        await client.discover_movies({"page": 2, "with_genres": "18,35", "vote_average.gte": 7})
        await client.discover_tv_shows({"page": 1})
        await client.close()

        params = seen[0].url.params
        assert seen[0].url.path == "/3/discover/movie"
        assert params["with_genres"] == "18,35"
        assert params["vote_average.gte"] == "7"
        assert seen[1].url.path == "/3/discover/tv"

    async def test_returns_json_body(self):
        _, handler = _recorder({"page": 1, "results": [{"id": 1}]})
        client = _client(handler)
        assert await client.get_trending() == {"page": 1, "results": [{"id": 1}]}
        await client.close()


class TestErrors:

    async def test_non_2xx_raises_with_status(self):
        _, handler = _recorder({"status_message": "The resource you requested could not be found."}, 404)
        client = _client(handler)
        with pytest.raises(TMDBError) as exc_info:
            await client.get_movie_details(999999)
        await client.close()

        assert exc_info.value.status == 404
        assert exc_info.value.path == "/movie/999999"
        assert "could not be found" in exc_info.value.body

    async def test_transport_error_has_no_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = _client(handler)
        with pytest.raises(TMDBError) as exc_info:
            await client.get_trending()
        await client.close()
        assert exc_info.value.status is None

    async def test_invalid_json_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        client = _client(handler)
        with pytest.raises(TMDBError):
            await client.get_trending()
        await client.close()


class TestLifecycle:

    async def test_client_is_reused_and_closed(self):
        _, handler = _recorder()
        client = _client(handler)
        await client.get_trending()
        first = client._client
        await client.get_trending()
        assert client._client is first

        await client.close()
        assert client._client is None
        await client.close()
