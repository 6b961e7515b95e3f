"""Container module - Centralized dependency injection.

All factories are app-scoped, lazy and memoized:

    from src.core.container import get_rate_limiter, get_response_cache

Organized into modules:
- infrastructure: logging, key-value store, response cache, rate limiter,
  session store
- services: application services (cache invalidation)
"""

from src.core.container.infrastructure import (
    get_key_value_store,
    get_logger,
    get_rate_limiter,
    get_response_cache,
    get_session_store,
)
from src.core.container.services import get_cache_invalidation_service


def reset_container() -> None:
    """Drop every memoized singleton (tests, settings reload)."""
    for factory in (
        get_cache_invalidation_service,
        get_session_store,
        get_rate_limiter,
        get_response_cache,
        get_key_value_store,
        get_logger,
    ):
        factory.cache_clear()


__all__ = [
    "get_cache_invalidation_service",
    "get_key_value_store",
    "get_logger",
    "get_rate_limiter",
    "get_response_cache",
    "get_session_store",
    "reset_container",
]
