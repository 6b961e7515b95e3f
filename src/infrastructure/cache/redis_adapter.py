"""Redis adapter implementing KeyValueAdapterProtocol.

Remote backend of the key-value store. Wraps an async Redis client and maps
every Redis failure (refused connection, bad token, timeout) to a CacheError
carried in a Failure, so nothing above this module ever sees an exception
from the network.

Architecture:
- Implements KeyValueAdapterProtocol without inheritance (structural typing)
- Maps Redis exceptions to CacheError with an InfrastructureErrorCode
- Returns Result types for all operations
- Pattern scans use SCAN (scan_iter), never KEYS, so the server is not blocked
"""

from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import CacheError


def _decode(value: Any) -> str | None:
    """Normalize a Redis reply (bytes or str) to str."""
    if value is None:
        return None
    return value.decode("utf-8") if isinstance(value, bytes) else str(value)


class RedisAdapter:
    """Redis implementation of KeyValueAdapterProtocol.

    Note: Does NOT inherit from KeyValueAdapterProtocol (uses structural typing).

    Attributes:
        _redis: Async Redis client instance.
        _scan_count: COUNT hint passed to SCAN.
    """

    def __init__(self, redis_client: Redis, *, scan_count: int = 100) -> None:
        """Initialize Redis adapter.

        Args:
            redis_client: Async Redis client instance. Building the client
                does not connect; the pool connects on first command.
            scan_count: Keys requested per SCAN round trip.
        """
        self._redis = redis_client
        self._scan_count = scan_count

    def _failure(
        self,
        operation: InfrastructureErrorCode,
        message: str,
        exc: Exception,
        **details: Any,
    ) -> Failure[CacheError]:
        """Map an exception raised by the client to a CacheError failure."""
        if isinstance(exc, RedisTimeoutError):
            infrastructure_code = InfrastructureErrorCode.CACHE_TIMEOUT
        elif isinstance(exc, RedisConnectionError):
            infrastructure_code = InfrastructureErrorCode.CACHE_CONNECTION_ERROR
        else:
            infrastructure_code = operation

        if isinstance(exc, RedisError):
            code = ErrorCode.STORE_UNAVAILABLE
        else:
            code = ErrorCode.STORE_OPERATION_FAILED
            details["type"] = type(exc).__name__

        return Failure(
            error=CacheError(
                code=code,
                infrastructure_code=infrastructure_code,
                message=message,
                details={**details, "error": str(exc)},
            )
        )

    async def get(self, key: str) -> Result[str | None, CacheError]:
        """Get value from Redis.

        Args:
            key: Store key.

        Returns:
            Result with value if found, None if not found, or CacheError.
        """
        try:
            value = await self._redis.get(key)
            return Success(value=_decode(value))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_GET_ERROR,
                f"Failed to get key '{key}'",
                e,
                key=key,
            )

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> Result[None, CacheError]:
        """Set value in Redis.

        Args:
            key: Store key.
            value: Serialized value.
            ttl: Time to live in seconds (None = no expiration).

        Returns:
            Result with None on success, or CacheError.
        """
        try:
            if ttl is not None:
                await self._redis.setex(key, ttl, value)
            else:
                await self._redis.set(key, value)
            return Success(value=None)
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_SET_ERROR,
                f"Failed to set key '{key}'",
                e,
                key=key,
                ttl=ttl,
            )

    async def delete(self, *keys: str) -> Result[int, CacheError]:
        """Delete one or more keys.

        Returns:
            Result with the number of keys removed, or CacheError.
        """
        if not keys:
            return Success(value=0)
        try:
            deleted_count = await self._redis.delete(*keys)
            return Success(value=int(deleted_count))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_DELETE_ERROR,
                f"Failed to delete {len(keys)} key(s)",
                e,
                keys=list(keys),
            )

    async def exists(self, key: str) -> Result[bool, CacheError]:
        try:
            exists_count = await self._redis.exists(key)
            return Success(value=exists_count > 0)
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_GET_ERROR,
                f"Failed to check existence of key '{key}'",
                e,
                key=key,
            )

    async def expire(self, key: str, seconds: int) -> Result[bool, CacheError]:
        """Set expiration on key in Redis.

        Returns:
            Result with True if timeout set, False if key doesn't exist, or CacheError.
        """
        try:
            was_set = await self._redis.expire(key, seconds)
            return Success(value=bool(was_set))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_SET_ERROR,
                f"Failed to set expiration on key '{key}'",
                e,
                key=key,
                seconds=seconds,
            )

    async def ttl(self, key: str) -> Result[int | None, CacheError]:
        try:
            ttl_value = await self._redis.ttl(key)
            # Redis returns -2 if key doesn't exist, -1 if no expiration
            if ttl_value < 0:
                return Success(value=None)
            return Success(value=int(ttl_value))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_GET_ERROR,
                f"Failed to get TTL for key '{key}'",
                e,
                key=key,
            )

    async def keys(self, pattern: str) -> Result[list[str], CacheError]:
        """List keys matching a glob pattern using incremental SCAN.

        Args:
            pattern: Redis glob pattern (e.g. "session:*").

        Returns:
            Result with matching keys (unordered), or CacheError.
        """
        try:
            found: list[str] = []
            async for raw_key in self._redis.scan_iter(
                match=pattern, count=self._scan_count
            ):
                found.append(_decode(raw_key) or "")
            return Success(value=found)
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_SCAN_ERROR,
                f"Failed to scan keys matching '{pattern}'",
                e,
                pattern=pattern,
            )

    async def increment(self, key: str, amount: int = 1) -> Result[int, CacheError]:
        """Increment value in Redis (atomic INCRBY, TTL untouched).

        Args:
            key: Store key.
            amount: Amount to increment by.

        Returns:
            Result with new value after increment, or CacheError.
        """
        try:
            new_value = await self._redis.incrby(key, amount)
            return Success(value=int(new_value))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_INCREMENT_ERROR,
                f"Failed to increment key '{key}'",
                e,
                key=key,
                amount=amount,
            )

    async def mget(self, keys: list[str]) -> Result[list[str | None], CacheError]:
        if not keys:
            return Success(value=[])
        try:
            values = await self._redis.mget(keys)
            return Success(value=[_decode(v) for v in values])
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_GET_ERROR,
                f"Failed to get {len(keys)} key(s)",
                e,
                keys=keys,
            )

    async def ping(self) -> Result[bool, CacheError]:
        """Check Redis connectivity.

        Returns:
            Result with True if the server answered, or CacheError.
        """
        try:
            response = await self._redis.ping()
            return Success(value=bool(response))
        except Exception as e:
            return self._failure(
                InfrastructureErrorCode.CACHE_CONNECTION_ERROR,
                "Failed to ping store",
                e,
            )
