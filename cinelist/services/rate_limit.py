"""Rate limiting service on the shared Upstash Redis store.

Each limiter counts requests per identifier in a Redis sorted set of
timestamped members. Windows are aligned to wall-clock multiples of the
window size (``floor(now / window) * window``), so this is a fixed-boundary
window: a burst straddling a boundary can see up to twice the nominal limit
across the two windows.

Limiters fail open. With no store, or when Redis errors, the request is
allowed.
"""

import math
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from cinelist.core.config import get_settings
from cinelist.core.degradation import fail_open
from cinelist.core.logging import get_logger
from cinelist.services.store import KeyValueStore, get_store

logger = get_logger(__name__)

# Idle identifiers expire this long after their window closes
KEY_TTL_BUFFER_SECONDS = 60


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate limit check."""

    allowed: bool
    remaining: int
    reset_time: int  # epoch milliseconds when the current window closes
    total_requests: int
    limit: int

    def retry_after(self, now_ms: int) -> int:
        """Whole seconds from ``now_ms`` until the window resets (at least 1)."""
        return max(1, math.ceil((self.reset_time - now_ms) / 1000))

    def headers(self) -> dict[str, str]:
        """X-RateLimit-* headers describing the caller's budget."""
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_time),
        }


class RateLimiter:
    """Window-counting rate limiter for one endpoint family."""

    def __init__(
        self,
        store: KeyValueStore | None,
        *,
        window_ms: int,
        max_requests: int,
        key_prefix: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.key_prefix = key_prefix
        self._clock = clock

    @property
    def is_available(self) -> bool:
        """Check if the backing store is available."""
        return self._store is not None

    def now_ms(self) -> int:
        """Current time on the limiter clock, in epoch milliseconds."""
        return int(self._clock() * 1000)

    def _allow_on_failure(self, identifier: str) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            remaining=self.max_requests - 1,
            reset_time=self.now_ms() + self.window_ms,
            total_requests=0,
            limit=self.max_requests,
        )

    @fail_open(_allow_on_failure, event="Rate limit check failed")
    async def check_limit(self, identifier: str) -> RateLimitResult:
        """Record one request for ``identifier`` and report whether it is allowed.

        The just-recorded request is included in the count, so the request
        that makes the count equal ``max_requests`` is still allowed.
        """
        key = f"{self.key_prefix}:{identifier}"
        now = self.now_ms()
        window_start = (now // self.window_ms) * self.window_ms
        member = f"{now}-{secrets.token_hex(6)}"

        pipe = self._store.pipeline()  # type: ignore[union-attr]
        pipe.zadd(key, {member: now})
        # Scores are integer milliseconds: drop everything before window_start
        pipe.zremrangebyscore(key, 0, window_start - 1)
        pipe.zcard(key)
        pipe.expire(key, self.window_ms // 1000 + KEY_TTL_BUFFER_SECONDS)
        results = await pipe.exec()

        count = int(results[2])
        allowed = count <= self.max_requests
        result = RateLimitResult(
            allowed=allowed,
            remaining=max(0, self.max_requests - count),
            reset_time=window_start + self.window_ms,
            total_requests=count,
            limit=self.max_requests,
        )

        if not allowed:
            logger.warning(
                "Rate limit exceeded",
                key=key,
                count=count,
                limit=self.max_requests,
                window_ms=self.window_ms,
            )
        return result


@dataclass(frozen=True)
class RateLimiters:
    """Independent per-endpoint limiters; each keeps its own budget."""

    search: RateLimiter
    discover: RateLimiter
    lists: RateLimiter

    def get(self, name: str) -> RateLimiter:
        return getattr(self, name)


def build_rate_limiters(
    store: KeyValueStore | None,
    clock: Callable[[], float] = time.time,
) -> RateLimiters:
    """Build the search/discover/lists limiters from settings."""
    settings = get_settings()
    if not settings.rate_limit_enabled:
        store = None

    return RateLimiters(
        search=RateLimiter(
            store,
            window_ms=settings.rate_limit_search_window_ms,
            max_requests=settings.rate_limit_search_max_requests,
            key_prefix="ratelimit:search",
            clock=clock,
        ),
        discover=RateLimiter(
            store,
            window_ms=settings.rate_limit_discover_window_ms,
            max_requests=settings.rate_limit_discover_max_requests,
            key_prefix="ratelimit:discover",
            clock=clock,
        ),
        lists=RateLimiter(
            store,
            window_ms=settings.rate_limit_lists_window_ms,
            max_requests=settings.rate_limit_lists_max_requests,
            key_prefix="ratelimit:lists",
            clock=clock,
        ),
    )


@lru_cache
def get_rate_limiters() -> RateLimiters:
    """Get the process-wide limiters (cached)."""
    limiters = build_rate_limiters(get_store())
    logger.info(
        "Rate limiting initialized",
        enabled=limiters.search.is_available,
        search_limit=limiters.search.max_requests,
        discover_limit=limiters.discover.max_requests,
        lists_limit=limiters.lists.max_requests,
    )
    return limiters
