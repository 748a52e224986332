"""Fail-open wrapper for store-backed operations.

Cache and rate-limit calls must never turn a Redis problem into a request
failure. Every store-backed coroutine method is decorated with ``fail_open``.
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from cinelist.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Longest key prefix written to the error log
MAX_LOGGED_KEY_LENGTH = 200


def _describe_key(args: tuple[Any, ...]) -> str | None:
    # First positional argument is the cache key or limiter identifier; the rest
    # may be whole payloads and are never logged.
    if not args:
        return None
    return str(args[0])[:MAX_LOGGED_KEY_LENGTH]


def _resolve(default: Any, instance: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
    if callable(default):
        return default(instance, *args, **kwargs)
    return default


def fail_open(
    default: Any,
    *,
    event: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Return ``default`` when the store is unavailable or the call raises.

    The decorated method's instance must expose ``is_available``. ``default``
    is either a plain value or a callable receiving ``(self, *args, **kwargs)``.
    Unavailability is an expected state and is not logged here; errors are
    logged at error level under ``event``.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> T:
            if not self.is_available:
                return _resolve(default, self, args, kwargs)  # type: ignore[no-any-return]
            try:
                return await func(self, *args, **kwargs)
            except Exception as e:
                logger.error(
                    event,
                    operation=func.__qualname__,
                    key=_describe_key(args),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return _resolve(default, self, args, kwargs)  # type: ignore[no-any-return]

        return wrapper

    return decorator
