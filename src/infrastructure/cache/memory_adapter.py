"""In-memory adapter implementing KeyValueAdapterProtocol.

Used when no remote store credentials are configured (local development,
tests). Behaves like a single Redis database inside one process:

- Values are strings; TTLs are tracked in a parallel expiry map
- Expiry is lazy: every read checks the deadline and evicts dead keys
- ``keys()`` matches Redis glob syntax (``*``, ``?``, ``[...]``)
- ``increment`` keeps an existing TTL, like INCRBY

Note:
    State is per process. Counters and sessions are not shared between
    workers, which is why rate limiting is disabled in memory mode.
"""

import math
import re
import time
from collections.abc import Callable

from src.core.enums import ErrorCode
from src.core.result import Failure, Result, Success
from src.infrastructure.enums import InfrastructureErrorCode
from src.infrastructure.errors import CacheError


def glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a Redis glob pattern to an anchored regular expression.

    Supports ``*`` (any run), ``?`` (one char), ``[abc]``/``[^abc]``/``[a-z]``
    classes and backslash escapes. Everything else matches literally.

    Example:
        >>> bool(glob_to_regex("user:42:*").match("user:42:stats"))
        True
        >>> bool(glob_to_regex("user:42:*").match("user:43:stats"))
        False
    """
    parts: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        elif char == "\\" and i + 1 < n:
            i += 1
            parts.append(re.escape(pattern[i]))
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[i + 1 : end]
                negate = body.startswith("^")
                if negate:
                    body = body[1:]
                body = body.replace("\\", "\\\\")
                parts.append(f"[{'^' if negate else ''}{body}]")
                i = end
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


class MemoryAdapter:
    """Process-local key-value store with Redis-like TTL semantics.

    Note: Does NOT inherit from KeyValueAdapterProtocol (uses structural typing).

    Attributes:
        _store: Key to string value.
        _expiry: Key to absolute deadline (epoch seconds, float).
        _clock: Optional time source returning epoch seconds.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        """Initialize empty store.

        Args:
            clock: Time source for TTL bookkeeping. Defaults to time.time,
                looked up on every call so frozen clocks in tests apply.
        """
        self._store: dict[str, str] = {}
        self._expiry: dict[str, float] = {}
        self._clock = clock

    def _now(self) -> float:
        return self._clock() if self._clock is not None else time.time()

    def _is_live(self, key: str) -> bool:
        """Evict the key if its deadline passed; report whether it survives."""
        if key not in self._store:
            return False
        deadline = self._expiry.get(key)
        if deadline is not None and deadline <= self._now():
            self._store.pop(key, None)
            self._expiry.pop(key, None)
            return False
        return True

    async def get(self, key: str) -> Result[str | None, CacheError]:
        if not self._is_live(key):
            return Success(value=None)
        return Success(value=self._store[key])

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> Result[None, CacheError]:
        """Store value, replacing any previous TTL (SET/SETEX semantics)."""
        self._store[key] = value
        if ttl is not None:
            self._expiry[key] = self._now() + ttl
        else:
            self._expiry.pop(key, None)
        return Success(value=None)

    async def delete(self, *keys: str) -> Result[int, CacheError]:
        deleted = 0
        for key in keys:
            if self._is_live(key):
                deleted += 1
            self._store.pop(key, None)
            self._expiry.pop(key, None)
        return Success(value=deleted)

    async def exists(self, key: str) -> Result[bool, CacheError]:
        return Success(value=self._is_live(key))

    async def expire(self, key: str, seconds: int) -> Result[bool, CacheError]:
        if not self._is_live(key):
            return Success(value=False)
        self._expiry[key] = self._now() + seconds
        return Success(value=True)

    async def ttl(self, key: str) -> Result[int | None, CacheError]:
        """Remaining whole seconds, rounded up; None for no key or no TTL."""
        if not self._is_live(key):
            return Success(value=None)
        deadline = self._expiry.get(key)
        if deadline is None:
            return Success(value=None)
        remaining = deadline - self._now()
        return Success(value=max(0, math.ceil(remaining)))

    async def keys(self, pattern: str) -> Result[list[str], CacheError]:
        """Full scan over live keys, O(total keys)."""
        regex = glob_to_regex(pattern)
        return Success(
            value=[
                key
                for key in list(self._store)
                if self._is_live(key) and regex.match(key)
            ]
        )

    async def increment(self, key: str, amount: int = 1) -> Result[int, CacheError]:
        """Atomic within the event loop: no await between read and write."""
        current = self._store[key] if self._is_live(key) else "0"
        try:
            new_value = int(current) + amount
        except ValueError:
            return Failure(
                error=CacheError(
                    code=ErrorCode.STORE_OPERATION_FAILED,
                    infrastructure_code=InfrastructureErrorCode.CACHE_INCREMENT_ERROR,
                    message=f"Value at key '{key}' is not an integer",
                    details={"key": key, "amount": amount},
                )
            )
        self._store[key] = str(new_value)
        return Success(value=new_value)

    async def mget(self, keys: list[str]) -> Result[list[str | None], CacheError]:
        return Success(
            value=[self._store[key] if self._is_live(key) else None for key in keys]
        )

    async def ping(self) -> Result[bool, CacheError]:
        return Success(value=True)

    def clear(self) -> None:
        """Drop every key (test helper)."""
        self._store.clear()
        self._expiry.clear()
