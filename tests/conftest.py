"""Test configuration and fixtures.

Provides isolated test fixtures for:
- An in-memory stand-in for the Upstash Redis client, driven by a fake clock
- Cache manager, rate limiters and cached TMDB service wired to that store
- HTTP client with dependency overrides
"""

import os

# Settings are cached on first use; pin the environment before the app imports
os.environ["TMDB_API_KEY"] = "test-tmdb-key"
os.environ["TMDB_READ_ACCESS_TOKEN"] = ""
os.environ["UPSTASH_REDIS_REST_URL"] = ""
os.environ["UPSTASH_REDIS_REST_TOKEN"] = ""
os.environ["CACHE_ADMIN_TOKEN"] = "test-admin-token"

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cinelist.main import app
from cinelist.services.cache import CacheManager, get_cache_manager
from cinelist.services.rate_limit import RateLimiters, build_rate_limiters, get_rate_limiters
from cinelist.services.store import KeyValueStore
from cinelist.services.tmdb import TMDBClient, TMDBEnhanced, get_tmdb_enhanced


# =============================================================================
# In-memory Redis
# =============================================================================

class FakeClock:
    """Manually advanced wall clock (seconds since the epoch)."""

    def __init__(self, start: float = 1_700_000_010.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePipeline:
    """Queues commands and runs them in order on ``exec()``."""

    def __init__(self, redis: "FakeRedis"):
        self._redis = redis
        self._commands: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def __getattr__(self, name: str) -> Any:
        def queue(*args: Any, **kwargs: Any) -> "FakePipeline":
            self._commands.append((name, args, kwargs))
            return self

        return queue

    async def exec(self) -> list[Any]:
        self._redis._check()
        commands, self._commands = self._commands, []
        return [await getattr(self._redis, name)(*args, **kwargs) for name, args, kwargs in commands]


class FakeRedis:
    """The subset of ``upstash_redis.asyncio.Redis`` the store adapter calls.

    Expiry follows the injected clock. Set ``fail = True`` to make every
    command raise, simulating an outage.
    """

    def __init__(self, clock: FakeClock):
        self._clock = clock
        self._data: dict[str, Any] = {}
        self._expiry: dict[str, float] = {}
        self.fail = False
        self.closed = False
        self.transactions = 0

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("redis unavailable")

    def _live(self, key: str) -> Any:
        expires_at = self._expiry.get(key)
        if expires_at is not None and self._clock() >= expires_at:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return self._data.get(key)

    def ttl(self, key: str) -> float | None:
        """Seconds until ``key`` expires (test helper)."""
        if self._live(key) is None or key not in self._expiry:
            return None
        return self._expiry[key] - self._clock()

    def keys(self) -> list[str]:
        return [k for k in list(self._data) if self._live(k) is not None]

    async def get(self, key: str) -> Any:
        self._check()
        value = self._live(key)
        return value if isinstance(value, str) else None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self._check()
        self._data[key] = value
        if ex:
            self._expiry[key] = self._clock() + ex
        else:
            self._expiry.pop(key, None)
        return True

    async def delete(self, *keys: str) -> int:
        self._check()
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                removed += 1
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return removed

    async def expire(self, key: str, seconds: int) -> bool:
        self._check()
        if self._live(key) is None:
            return False
        self._expiry[key] = self._clock() + seconds
        return True

    async def sadd(self, key: str, *members: str) -> int:
        self._check()
        current = self._live(key)
        if current is None:
            current = self._data[key] = set()
        added = len(set(members) - current)
        current.update(members)
        return added

    async def smembers(self, key: str) -> list[str]:
        self._check()
        return sorted(self._live(key) or set())

    async def srem(self, key: str, *members: str) -> int:
        self._check()
        current = self._live(key) or set()
        removed = len(current & set(members))
        current.difference_update(members)
        return removed

    async def scard(self, key: str) -> int:
        self._check()
        return len(self._live(key) or set())

    async def zadd(self, key: str, scores: dict[str, float]) -> int:
        self._check()
        current = self._live(key)
        if current is None:
            current = self._data[key] = {}
        added = len([m for m in scores if m not in current])
        current.update(scores)
        return added

    async def zremrangebyscore(self, key: str, min_score: float, max_score: float) -> int:
        self._check()
        current = self._live(key) or {}
        doomed = [m for m, score in current.items() if min_score <= score <= max_score]
        for member in doomed:
            del current[member]
        return len(doomed)

    async def zcard(self, key: str) -> int:
        self._check()
        return len(self._live(key) or {})

    async def ping(self) -> str:
        self._check()
        return "PONG"

    async def close(self) -> None:
        self.closed = True

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self)

    def multi(self) -> FakePipeline:
        self.transactions += 1
        return FakePipeline(self)


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def store(fake_redis: FakeRedis) -> KeyValueStore:
    return KeyValueStore(fake_redis)  # type: ignore[arg-type]


@pytest.fixture
def cache(store: KeyValueStore) -> CacheManager:
    return CacheManager(store)


@pytest.fixture
def limiters(store: KeyValueStore, clock: FakeClock) -> RateLimiters:
    return build_rate_limiters(store, clock=clock)


# =============================================================================
# TMDB Fixtures
# =============================================================================

MOVIE = {"id": 550, "title": "Fight Club", "media_type": "movie"}
SHOW = {"id": 1399, "name": "Game of Thrones", "media_type": "tv"}


def _paged(*results: dict[str, Any]) -> dict[str, Any]:
    return {"page": 1, "results": list(results), "total_pages": 1, "total_results": len(results)}


@pytest.fixture
def tmdb_upstream() -> MagicMock:
    """Mock TMDB HTTP client returning small canned documents."""
    mock = MagicMock(spec=TMDBClient)
    mock.get_trending = AsyncMock(return_value=_paged(MOVIE))
    mock.search_multi = AsyncMock(return_value=_paged(MOVIE, SHOW))
    mock.search_keyword = AsyncMock(return_value=_paged({"id": 9715, "name": "superhero"}))
    mock.get_movie_details = AsyncMock(return_value={"id": 550, "title": "Fight Club"})
    mock.get_tv_details = AsyncMock(return_value={"id": 1399, "name": "Game of Thrones"})
    mock.get_tv_season = AsyncMock(return_value={"id": 3624, "season_number": 1, "episodes": []})
    mock.discover_movies = AsyncMock(return_value=_paged(MOVIE, SHOW))
    mock.discover_tv_shows = AsyncMock(return_value=_paged(MOVIE, SHOW))
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def tmdb(tmdb_upstream: MagicMock, cache: CacheManager) -> TMDBEnhanced:
    return TMDBEnhanced(tmdb_upstream, cache)


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest_asyncio.fixture(scope="function")
async def client(
    tmdb: TMDBEnhanced,
    cache: CacheManager,
    limiters: RateLimiters,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client backed by the in-memory store."""
    app.dependency_overrides[get_tmdb_enhanced] = lambda: tmdb
    app.dependency_overrides[get_cache_manager] = lambda: cache
    app.dependency_overrides[get_rate_limiters] = lambda: limiters

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
