"""Routes module exports."""

from cinelist.api.routes.cache import router as cache_router
from cinelist.api.routes.catalog import router as catalog_router
from cinelist.api.routes.health import router as health_router

__all__ = [
    "cache_router",
    "catalog_router",
    "health_router",
]
