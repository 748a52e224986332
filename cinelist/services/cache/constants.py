"""Cache TTL, prefix and tag constants."""

# Cache TTL constants (in seconds)
TTL_DEFAULT = 3600  # 1 hour - used when a caller passes no TTL
TTL_TRENDING = 1800  # 30 minutes - trending lists shift slowly
TTL_DETAILS = 3600  # 1 hour - movie/TV details keyed by TMDB id
TTL_SEARCH = 900  # 15 minutes - unbounded query space, lower staleness tolerance
TTL_DISCOVER = 1800  # 30 minutes - filtered listings
TTL_SEASON = 3600  # 1 hour - season episode lists

# Tag sets outlive the entries they index by this many seconds
TAG_TTL_BUFFER = 3600

# Cache key prefixes
KEY_PREFIX_TMDB = "tmdb"  # tmdb:movie:{id}, tmdb:search:{q}:page:{n}
KEY_PREFIX_TAG = "tag"  # tag:{tagname} -> set of full cache keys
