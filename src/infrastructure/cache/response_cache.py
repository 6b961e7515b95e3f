"""Response cache over the fail-soft key-value store.

Memoizes results of expensive reads under keys from CacheKeys, with TTL
tiers from CacheTTL. A miss and a store failure look the same to callers
(None), so handlers never fail because of the cache.

Read path:
    key = CacheKeys.node_comments(node_id)
    comments = await response_cache.get_or_set(key, load_comments, CacheTTL.MEDIUM)

Write path:
    await repository.save(comment)
    await invalidation_service.on_comment_action(node_id)   # before responding
"""

import functools
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, TypeVar

from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.cache.cache_keys import (
    CacheKeys,
    CacheTTL,
    namespace_from_key,
)
from src.infrastructure.cache.key_value_store import KeyValueStore

P = ParamSpec("P")
R = TypeVar("R")


class ResponseCache:
    """Generic JSON response cache.

    Attributes:
        _store: Fail-soft key-value store.
        _logger: Structured logger.
    """

    def __init__(self, store: KeyValueStore, logger: LoggerProtocol) -> None:
        self._store = store
        self._logger = logger

    async def get(self, key: str) -> Any:
        """Get cached value.

        Args:
            key: Key from CacheKeys.

        Returns:
            Cached value, or None on miss, expiry or store failure.
        """
        value = await self._store.get(key)
        self._logger.debug(
            "Cache lookup",
            namespace=namespace_from_key(key),
            hit=value is not None,
        )
        return value

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int = CacheTTL.MEDIUM,
    ) -> None:
        """Store value, overwriting any previous entry wholesale.

        Args:
            key: Key from CacheKeys.
            value: JSON-serializable payload.
            ttl_seconds: Lifetime, normally a CacheTTL tier.
        """
        await self._store.set(key, value, int(ttl_seconds))

    async def delete(self, key: str) -> None:
        await self._store.delete(key)

    async def invalidate_pattern(self, pattern: str) -> list[str]:
        """Delete every key matching a glob pattern.

        Note:
            Scans the whole keyspace, O(total keys). A per-entity index of
            cache keys would be required to avoid the scan at larger scale.

        Args:
            pattern: Glob pattern (e.g. "user:42:*").

        Returns:
            Keys that matched and were submitted for deletion. Empty when
            nothing matched or the scan failed.
        """
        keys = await self._store.keys(pattern)
        if keys:
            await self._store.delete(*keys)
        self._logger.debug(
            "Cache pattern invalidated",
            pattern=pattern,
            deleted_count=len(keys),
        )
        return keys

    async def increment(self, key: str, amount: int = 1) -> int:
        """Atomic counter (view counts etc.). Returns 0 on store failure."""
        return await self._store.incr_by(key, amount)

    async def mget(self, keys: list[str]) -> list[Any]:
        return await self._store.mget(keys)

    async def get_or_set(
        self,
        key: str,
        factory: Callable[[], Awaitable[Any]],
        ttl_seconds: int = CacheTTL.MEDIUM,
    ) -> Any:
        """Return the cached value, computing and storing it on a miss.

        Exceptions raised by ``factory`` propagate and nothing is cached.
        A factory result of None is returned but not stored.
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await factory()
        if value is not None:
            await self.set(key, value, ttl_seconds)
        return value

    def cached(
        self,
        ttl_seconds: int = CacheTTL.MEDIUM,
        key_builder: Callable[..., str] | None = None,
    ) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
        """Decorator memoizing an async function's result.

        Default key: ``method:{owner}:{name}:{json args}`` where owner is the
        defining class (or the module for plain functions).

        Args:
            ttl_seconds: Lifetime of memoized results.
            key_builder: Optional function receiving the call arguments and
                returning the cache key.

        Example:
            @response_cache.cached(ttl_seconds=CacheTTL.LONG)
            async def node_summary(node_id: str) -> dict: ...
        """

        def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
            owner, _, name = func.__qualname__.rpartition(".")
            owner = owner or func.__module__

            @functools.wraps(func)
            async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                if key_builder is not None:
                    key = key_builder(*args, **kwargs)
                else:
                    # Bound methods: the instance is not part of the key
                    is_method = (
                        owner != func.__module__
                        and bool(args)
                        and getattr(type(args[0]), name, None) is not None
                    )
                    key_args = args[1:] if is_method else args
                    key = CacheKeys.method(owner, name, tuple(key_args), kwargs)
                return await self.get_or_set(
                    key, lambda: func(*args, **kwargs), ttl_seconds
                )

            return wrapper

        return decorator
