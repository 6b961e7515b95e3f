"""Fail-soft key-value store used by the cache, rate limiter and sessions.

Wraps a KeyValueAdapterProtocol implementation and turns every Failure into a
safe default plus exactly one structured warning. Callers above this layer
are written as if the store were always available:

    get      -> None        set      -> no-op
    delete   -> 0           exists   -> False
    expire   -> False       ttl      -> None
    keys     -> []          incr_by  -> 0
    mget     -> [None, ...] ping     -> False

Values are JSON-encoded on write and decoded on read, so any JSON-compatible
structure round-trips. Counters written by ``incr_by`` decode to int.

Usage:
    from src.core.container import get_key_value_store

    store = get_key_value_store()
    await store.set("user:profile:42", {"name": "Ada"}, ttl_seconds=300)
    profile = await store.get("user:profile:42")
"""

import json
from typing import Any, TypeVar

from src.core.result import Failure, Result, Success
from src.domain.enums import StoreBackend
from src.domain.protocols.key_value_adapter_protocol import KeyValueAdapterProtocol
from src.domain.protocols.logger_protocol import LoggerProtocol

T = TypeVar("T")


class KeyValueStore:
    """JSON key-value store that never raises.

    Attributes:
        backend: Which adapter is in use (redis or memory).
    """

    def __init__(
        self,
        adapter: KeyValueAdapterProtocol,
        logger: LoggerProtocol,
        *,
        backend: StoreBackend = StoreBackend.MEMORY,
    ) -> None:
        """Initialize store facade.

        Args:
            adapter: Low-level adapter (RedisAdapter or MemoryAdapter).
            logger: Logger for converted failures.
            backend: Backend tag reported by health checks.
        """
        self._adapter = adapter
        self._logger = logger
        self.backend = backend

    @property
    def is_remote(self) -> bool:
        """True when backed by the shared remote store."""
        return self.backend is StoreBackend.REDIS

    def _unwrap(
        self,
        result: Result[T, Any],
        default: T,
        operation: str,
        **context: Any,
    ) -> T:
        """Return the Success value, or log one warning and return default."""
        match result:
            case Success(value=value):
                return value
            case Failure(error=error):
                self._logger.warning(
                    "Store operation failed, using safe default",
                    operation=operation,
                    backend=self.backend.value,
                    error_code=getattr(getattr(error, "code", None), "value", None),
                    error_message=getattr(error, "message", str(error)),
                    **context,
                )
                return default
            case _:
                return default

    def _decode(self, key: str, raw: str | None) -> Any:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            self._logger.warning(
                "Stored value is not valid JSON, treating as miss", key=key
            )
            return None

    async def get(self, key: str) -> Any:
        """Get decoded value, None on miss or store failure."""
        raw = self._unwrap(await self._adapter.get(key), None, "get", key=key)
        return self._decode(key, raw)

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a JSON-serializable value, optionally with a TTL in seconds."""
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            self._logger.warning(
                "Value is not JSON serializable, skipping write",
                key=key,
                error_message=str(e),
            )
            return
        self._unwrap(
            await self._adapter.set(key, payload, ttl_seconds),
            None,
            "set",
            key=key,
            ttl=ttl_seconds,
        )

    async def delete(self, *keys: str) -> int:
        """Delete keys; returns how many existed."""
        if not keys:
            return 0
        return self._unwrap(
            await self._adapter.delete(*keys), 0, "delete", key_count=len(keys)
        )

    async def exists(self, key: str) -> bool:
        return self._unwrap(await self._adapter.exists(key), False, "exists", key=key)

    async def expire(self, key: str, seconds: int) -> bool:
        return self._unwrap(
            await self._adapter.expire(key, seconds), False, "expire", key=key
        )

    async def ttl(self, key: str) -> int | None:
        """Remaining TTL in seconds, None when missing, persistent or on failure."""
        return self._unwrap(await self._adapter.ttl(key), None, "ttl", key=key)

    async def keys(self, pattern: str) -> list[str]:
        """Keys matching a glob pattern.

        Note:
            Full keyspace scan, O(total keys). Fine at current scale; a
            per-owner index set would be needed beyond that.
        """
        return self._unwrap(
            await self._adapter.keys(pattern), [], "keys", pattern=pattern
        )

    async def incr_by(self, key: str, amount: int = 1) -> int:
        """Atomic increment. Returns 0 when the store failed."""
        return self._unwrap(
            await self._adapter.increment(key, amount), 0, "incr_by", key=key
        )

    async def mget(self, keys: list[str]) -> list[Any]:
        if not keys:
            return []
        raws = self._unwrap(
            await self._adapter.mget(keys),
            [None] * len(keys),
            "mget",
            key_count=len(keys),
        )
        return [self._decode(key, raw) for key, raw in zip(keys, raws, strict=False)]

    async def ping(self) -> bool:
        return self._unwrap(await self._adapter.ping(), False, "ping")
