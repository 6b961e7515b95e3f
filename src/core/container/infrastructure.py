"""Infrastructure dependency factories.

Application-scoped singletons, built lazily on first call and memoized with
``lru_cache`` for the process lifetime:
- Logging (structlog console adapter)
- Key-value store (Redis or in-memory)
- Response cache
- Rate limiter (window counter)
- Session store

No factory performs I/O: building the Redis client does not connect, so an
unreachable store never fails process boot. Tests reset a factory with
``get_x.cache_clear()``.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import settings

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
    from src.infrastructure.cache.key_value_store import KeyValueStore
    from src.infrastructure.cache.response_cache import ResponseCache
    from src.infrastructure.cache.session_store import SessionStore


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    - development/production: ConsoleAdapter (human-readable)
    - testing/ci: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    use_json = settings.is_testing or settings.is_ci
    return ConsoleAdapter(
        use_json=use_json,
        level=settings.log_level,
        service=settings.app_name,
    )


@lru_cache()
def get_key_value_store() -> "KeyValueStore":
    """Get the fail-soft key-value store singleton (app-scoped).

    Backend chosen once from configuration: RedisAdapter when REDIS_URL and
    REDIS_TOKEN are both set, MemoryAdapter otherwise.

    Usage:
        # Presentation Layer (FastAPI Depends)
        store: KeyValueStore = Depends(get_key_value_store)
    """
    from src.infrastructure.cache.factory import create_key_value_store

    return create_key_value_store(settings, get_logger())


@lru_cache()
def get_response_cache() -> "ResponseCache":
    """Get response cache singleton (app-scoped)."""
    from src.infrastructure.cache.response_cache import ResponseCache

    return ResponseCache(get_key_value_store(), get_logger())


@lru_cache()
def get_rate_limiter() -> "RateLimitProtocol":
    """Get rate limiter singleton (app-scoped).

    Disabled (every check allowed, no headers) when RATE_LIMIT_ENABLED is
    false or the store runs in memory mode: per-process counters would not
    be shared between workers.

    Fail-Open Design:
        Rate limit infrastructure failures NEVER cause denial of service.
    """
    from src.infrastructure.rate_limit.window_counter_adapter import (
        WindowCounterRateLimiter,
    )

    store = get_key_value_store()
    logger = get_logger()
    enabled = settings.rate_limit_enabled and store.is_remote
    if not enabled:
        logger.info(
            "Rate limiting disabled",
            rate_limit_enabled=settings.rate_limit_enabled,
            backend=store.backend.value,
        )
    return WindowCounterRateLimiter(store=store, logger=logger, enabled=enabled)


@lru_cache()
def get_session_store() -> "SessionStore":
    """Get session store singleton (app-scoped).

    Cookie name derives from APP_NAME; the Secure flag is set in production.
    """
    from src.infrastructure.cache.session_store import SessionStore

    return SessionStore(
        get_key_value_store(),
        get_logger(),
        cookie_name=settings.session_cookie_name,
        ttl_seconds=settings.session_ttl_seconds,
        secure_cookie=settings.is_production,
    )
