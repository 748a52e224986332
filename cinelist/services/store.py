"""Key-value store adapter over the Upstash Redis REST client.

The adapter is the only place that constructs a Redis client. When Upstash
credentials are missing the factory returns ``None`` and every consumer treats
that as "store unavailable".
"""

from functools import lru_cache
from typing import Any

from upstash_redis.asyncio import Redis

from cinelist.core.config import Settings, get_settings
from cinelist.core.logging import get_logger

logger = get_logger(__name__)


class KeyValueStore:
    """Thin async wrapper exposing the Redis commands the cache and limiter use."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    # ========== String operations ==========

    async def get(self, key: str) -> str | None:
        result = await self._client.get(key)
        return result if isinstance(result, str) else None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """Set a value, optionally expiring after ``ex`` seconds."""
        if ex:
            result = await self._client.set(key, value, ex=ex)
        else:
            result = await self._client.set(key, value)
        return bool(result)

    async def delete(self, *keys: str) -> int:
        """Delete keys. Missing keys are not an error; returns the number removed."""
        if not keys:
            return 0
        return int(await self._client.delete(*keys))

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._client.expire(key, seconds))

    # ========== Set operations ==========

    async def sadd(self, key: str, *members: str) -> int:
        return int(await self._client.sadd(key, *members))

    async def smembers(self, key: str) -> list[str]:
        result = await self._client.smembers(key)
        return list(result) if result else []

    async def srem(self, key: str, *members: str) -> int:
        return int(await self._client.srem(key, *members))

    async def scard(self, key: str) -> int:
        return int(await self._client.scard(key))

    # ========== Sorted Set operations ==========

    async def zadd(self, key: str, scores: dict[str, float]) -> int:
        return int(await self._client.zadd(key, scores))

    async def zremrangebyscore(self, key: str, min_score: float | str, max_score: float | str) -> int:
        return int(await self._client.zremrangebyscore(key, min_score, max_score))

    async def zcard(self, key: str) -> int:
        return int(await self._client.zcard(key))

    # ========== Batching ==========

    def pipeline(self) -> Any:
        """Batch commands into one round trip (not atomic)."""
        return self._client.pipeline()

    def transaction(self) -> Any:
        """Batch commands into one MULTI/EXEC round trip."""
        return self._client.multi()

    # ========== Lifecycle ==========

    async def ping(self) -> bool:
        result = await self._client.ping()
        return result == "PONG" or result is True

    async def close(self) -> None:
        await self._client.close()


def create_store(settings: Settings) -> KeyValueStore | None:
    """Build the store from settings, or ``None`` when Redis is not configured."""
    if settings.redis_partially_configured:
        logger.warning(
            "Redis partially configured, both UPSTASH_REDIS_REST_URL and "
            "UPSTASH_REDIS_REST_TOKEN are required",
            note="Caching and rate limiting will degrade gracefully",
        )
        return None

    if not settings.redis_available:
        logger.warning(
            "Redis not configured, caching and rate limiting disabled",
            note="Features will work with graceful degradation",
        )
        return None

    try:
        client = Redis(
            url=settings.upstash_redis_rest_url,
            token=settings.upstash_redis_rest_token,
        )
    except Exception as e:
        logger.warning("Failed to initialize Redis store", error=str(e))
        return None

    logger.info("Redis store initialized")
    return KeyValueStore(client)


@lru_cache
def get_store() -> KeyValueStore | None:
    """Get the process-wide store (created once, on first use)."""
    return create_store(get_settings())
