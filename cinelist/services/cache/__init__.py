"""Tagged TTL cache backed by Upstash Redis.

Provides:
- JSON string entries with per-entry TTL (SET ... EX)
- Tag sets (SADD/SMEMBERS) for bulk invalidation without key scans
- Graceful degradation when the store is unavailable or failing
"""

from cinelist.services.cache.constants import (
    KEY_PREFIX_TAG,
    KEY_PREFIX_TMDB,
    TAG_TTL_BUFFER,
    TTL_DEFAULT,
    TTL_DETAILS,
    TTL_DISCOVER,
    TTL_SEARCH,
    TTL_SEASON,
    TTL_TRENDING,
)
from cinelist.services.cache.manager import CacheManager, get_cache_manager

__all__ = [
    # TTL constants
    "TTL_DEFAULT",
    "TTL_TRENDING",
    "TTL_DETAILS",
    "TTL_SEARCH",
    "TTL_DISCOVER",
    "TTL_SEASON",
    "TAG_TTL_BUFFER",
    # Key prefix constants
    "KEY_PREFIX_TMDB",
    "KEY_PREFIX_TAG",
    # Manager
    "CacheManager",
    "get_cache_manager",
]
