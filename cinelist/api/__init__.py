"""API module exports."""

from cinelist.api.routes import cache_router, catalog_router, health_router
from cinelist.api.deps import DiscoverRateLimit, ListsRateLimit, SearchRateLimit, TMDBService

__all__ = [
    # Routers
    "cache_router",
    "catalog_router",
    "health_router",
    # Dependencies
    "DiscoverRateLimit",
    "ListsRateLimit",
    "SearchRateLimit",
    "TMDBService",
]
