"""Services module exports."""

from cinelist.services.cache import CacheManager, get_cache_manager
from cinelist.services.rate_limit import (
    RateLimiter,
    RateLimiters,
    RateLimitResult,
    get_rate_limiters,
)
from cinelist.services.store import KeyValueStore, create_store, get_store
from cinelist.services.tmdb import (
    TMDBClient,
    TMDBEnhanced,
    TMDBError,
    get_tmdb_client,
    get_tmdb_enhanced,
)

__all__ = [
    # Store
    "KeyValueStore",
    "create_store",
    "get_store",
    # Cache
    "CacheManager",
    "get_cache_manager",
    # Rate Limiting
    "RateLimiter",
    "RateLimiters",
    "RateLimitResult",
    "get_rate_limiters",
    # TMDB
    "TMDBClient",
    "TMDBEnhanced",
    "TMDBError",
    "get_tmdb_client",
    "get_tmdb_enhanced",
]
