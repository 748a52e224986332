"""Core module exports."""

from cinelist.core.config import Settings, get_settings
from cinelist.core.degradation import fail_open
from cinelist.core.exceptions import (
    AppError,
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    UpstreamError,
)
from cinelist.core.logging import get_logger, setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Degradation
    "fail_open",
    # Exceptions
    "AppError",
    "AuthorizationError",
    "NotFoundError",
    "RateLimitError",
    "UpstreamError",
]
