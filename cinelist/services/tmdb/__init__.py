"""TMDB catalog access: HTTP client and its read-through cached wrapper."""

from cinelist.services.tmdb.client import TMDBClient, TMDBError, get_tmdb_client
from cinelist.services.tmdb.enhanced import TMDBEnhanced, get_tmdb_enhanced

__all__ = [
    "TMDBClient",
    "TMDBError",
    "get_tmdb_client",
    "TMDBEnhanced",
    "get_tmdb_enhanced",
]
