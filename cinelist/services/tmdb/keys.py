"""Deterministic cache keys for TMDB responses.

Keys are relative to the ``tmdb`` prefix applied by the cache manager.
"""

from typing import Any, Literal

MediaType = Literal["movie", "tv"]
TimeWindow = Literal["day", "week"]


def normalize_query(query: str) -> str:
    return query.lower().strip()


def trending_key(media_type: str, time_window: str) -> str:
    return f"trending:{media_type}:{time_window}"


def search_key(query: str, page: int) -> str:
    return f"search:{normalize_query(query)}:page:{page}"


def keyword_search_key(query: str) -> str:
    return f"search:keyword:{normalize_query(query)}"


def _append_suffix(append_to_response: str | None) -> str:
    if not append_to_response:
        return ""
    parts = sorted(p.strip() for p in append_to_response.split(",") if p.strip())
    return f":append:{','.join(parts)}" if parts else ""


def movie_details_key(movie_id: int | str, append_to_response: str | None = None) -> str:
    return f"movie:{movie_id}{_append_suffix(append_to_response)}"


def tv_details_key(tv_id: int | str, append_to_response: str | None = None) -> str:
    return f"tv:{tv_id}{_append_suffix(append_to_response)}"


def tv_season_key(tv_id: int | str, season_number: int) -> str:
    return f"tv:{tv_id}:season:{season_number}"


def _format_option(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def discover_key(kind: Literal["movies", "tv"], options: dict[str, Any] | None) -> str:
    """Build ``discover:{kind}:{k1}:{v1}:...`` with option names sorted.

    Options set to ``None`` are left out, so ``{"page": 1}`` and
    ``{"page": 1, "with_genres": None}`` share a key.
    """
    items = {k: v for k, v in (options or {}).items() if v is not None}
    joined = ":".join(f"{k}:{_format_option(items[k])}" for k in sorted(items))
    return f"discover:{kind}:{joined}"
