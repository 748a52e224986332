"""API dependencies for FastAPI routes."""

import hmac
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Header, Request, Response

from cinelist.core.config import Settings, get_settings
from cinelist.core.exceptions import AuthorizationError, NotFoundError, RateLimitError
from cinelist.services.rate_limit import RateLimiters, RateLimitResult, get_rate_limiters
from cinelist.services.tmdb import TMDBEnhanced, get_tmdb_enhanced


def get_client_ip(request: Request) -> str:
    """Best-effort client address for rate limiting.

    Checks X-Forwarded-For (first hop), X-Real-IP, CF-Connecting-IP, then the
    socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first

    for header in ("X-Real-IP", "CF-Connecting-IP"):
        value = request.headers.get(header)
        if value and value.strip():
            return value.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(name: str) -> Callable[..., Awaitable[RateLimitResult]]:
    """Build a dependency that checks the named per-endpoint limiter.

    Allowed requests get X-RateLimit-* headers on the response; denied ones
    raise ``RateLimitError`` which renders a 429 with the same headers plus
    Retry-After.
    """

    async def check(
        request: Request,
        response: Response,
        limiters: Annotated[RateLimiters, Depends(get_rate_limiters)],
    ) -> RateLimitResult:
        identifier = f"ip:{get_client_ip(request)}"
        limiter = limiters.get(name)
        result = await limiter.check_limit(identifier)

        if not result.allowed:
            raise RateLimitError(
                retry_after=result.retry_after(limiter.now_ms()),
                headers=result.headers(),
            )

        response.headers.update(result.headers())
        return result

    check.__name__ = f"check_{name}_rate_limit"
    return check


async def require_admin_token(
    settings: Annotated[Settings, Depends(get_settings)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    """Guard cache administration endpoints with a shared secret.

    Raises:
        NotFoundError: If no admin token is configured (endpoints disabled)
        AuthorizationError: If the supplied token does not match
    """
    if not settings.cache_admin_token:
        raise NotFoundError("Endpoint")

    if not x_admin_token or not hmac.compare_digest(x_admin_token, settings.cache_admin_token):
        raise AuthorizationError("Invalid admin token")


# Type aliases for cleaner route signatures
TMDBService = Annotated[TMDBEnhanced, Depends(get_tmdb_enhanced)]
SearchRateLimit = Annotated[RateLimitResult, Depends(rate_limit("search"))]
DiscoverRateLimit = Annotated[RateLimitResult, Depends(rate_limit("discover"))]
ListsRateLimit = Annotated[RateLimitResult, Depends(rate_limit("lists"))]
AdminToken = Annotated[None, Depends(require_admin_token)]
