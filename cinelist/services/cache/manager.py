"""Tagged TTL cache on top of the key-value store.

Entries are JSON strings stored with an expiry. Each tag is a Redis set
(``tag:{name}``) listing the full cache keys written under it, which is what
bulk invalidation walks since the REST API offers no prefix delete.
"""

import asyncio
import json
from functools import lru_cache
from typing import Any

from cinelist.core.degradation import fail_open
from cinelist.core.logging import get_logger
from cinelist.services.cache.constants import KEY_PREFIX_TAG, TAG_TTL_BUFFER, TTL_DEFAULT
from cinelist.services.store import KeyValueStore, get_store

logger = get_logger(__name__)


class CacheManager:
    """Read-through cache primitives with tag-based invalidation.

    All operations fail open: with no store, or when the store raises,
    reads miss, writes report ``False`` and invalidations report ``0``.
    """

    def __init__(self, store: KeyValueStore | None) -> None:
        self._store = store

    @property
    def is_available(self) -> bool:
        """Check if cache is available."""
        return self._store is not None

    def _make_key(self, key: str, prefix: str | None = None) -> str:
        return f"{prefix}:{key}" if prefix else key

    def _tag_key(self, tag: str) -> str:
        return f"{KEY_PREFIX_TAG}:{tag}"

    @fail_open(None, event="Cache get failed")
    async def get(self, key: str, prefix: str | None = None) -> Any | None:
        """Get a cached value, or ``None`` on miss."""
        cache_key = self._make_key(key, prefix)
        raw = await self._store.get(cache_key)  # type: ignore[union-attr]

        if raw is None:
            logger.debug("Cache miss", key=cache_key)
            return None

        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Cache JSON decode failed", key=cache_key)
            return None

        logger.debug("Cache hit", key=cache_key)
        return value

    @fail_open(False, event="Cache set failed")
    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int | None = None,
        prefix: str | None = None,
        tags: list[str] | None = None,
    ) -> bool:
        """Store a value with TTL and register it under each tag.

        The value write and every tag-set update go out as one MULTI/EXEC, so a
        tag set can never be left with a shorter expiry than the entry it lists.
        """
        cache_key = self._make_key(key, prefix)
        ttl = ttl_seconds if ttl_seconds is not None else TTL_DEFAULT
        payload = json.dumps(value)

        tx = self._store.transaction()  # type: ignore[union-attr]
        tx.set(cache_key, payload, ex=ttl)
        for tag in tags or []:
            tag_key = self._tag_key(tag)
            tx.sadd(tag_key, cache_key)
            tx.expire(tag_key, ttl + TAG_TTL_BUFFER)
        await tx.exec()

        logger.debug(
            "Cache set",
            key=cache_key,
            ttl=ttl,
            tags=",".join(tags) if tags else "none",
        )
        return True

    @fail_open(False, event="Cache delete failed")
    async def delete(self, key: str, prefix: str | None = None) -> bool:
        """Delete a cached value. Deleting a missing key succeeds."""
        cache_key = self._make_key(key, prefix)
        await self._store.delete(cache_key)  # type: ignore[union-attr]
        logger.debug("Cache deleted", key=cache_key)
        return True

    @fail_open(0, event="Cache tag invalidation failed")
    async def invalidate_tag(self, tag: str) -> int:
        """Delete every entry listed under ``tag`` and the tag set itself.

        Members whose entry already expired are deleted as no-ops. Returns the
        number of keys the tag listed.
        """
        tag_key = self._tag_key(tag)
        keys = await self._store.smembers(tag_key)  # type: ignore[union-attr]

        if not keys:
            return 0

        await self._store.delete(*keys)  # type: ignore[union-attr]
        await self._store.delete(tag_key)  # type: ignore[union-attr]

        logger.info("Cache tag invalidated", tag=tag, keys_deleted=len(keys))
        return len(keys)

    async def invalidate_tags(self, tags: list[str]) -> int:
        """Invalidate several tags concurrently and sum the deleted counts.

        Tags are independent: nothing cascades, so callers name every family
        they want purged.
        """
        if not self.is_available or not tags:
            return 0

        counts = await asyncio.gather(*(self.invalidate_tag(tag) for tag in tags))
        return sum(counts)

    async def check_health(self, timeout: float = 5.0) -> bool:
        """Check Redis connectivity with timeout."""
        if not self.is_available:
            return False

        try:
            return await asyncio.wait_for(
                self._store.ping(),  # type: ignore[union-attr]
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Redis health check timed out", timeout=timeout)
            return False
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False


@lru_cache
def get_cache_manager() -> CacheManager:
    """Get or create the process-wide cache manager."""
    return CacheManager(get_store())
