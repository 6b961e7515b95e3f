"""Key-value adapter protocol for the domain layer.

Defines the low-level store interface that the remote (Redis) and in-memory
adapters both implement. The two adapters are structurally identical; the
factory in src.infrastructure.cache.factory picks one once at startup.

Architecture:
- Protocol-based - uses structural typing
- Raw string payloads (serialization happens one layer up)
- All operations return Result types, adapters never raise
- No framework dependencies in domain layer
"""

from typing import Protocol

from src.core.errors import DomainError
from src.core.result import Result


class KeyValueAdapterProtocol(Protocol):
    """Key-value adapter protocol - what the store facade needs.

    Semantics follow Redis: TTLs are in whole seconds, ``increment`` is atomic
    and keeps an existing TTL, ``keys`` takes a glob pattern.
    """

    async def get(self, key: str) -> Result[str | None, DomainError]:
        """Get raw value.

        Args:
            key: Store key.

        Returns:
            Result with value if found, None if missing or expired.
        """
        ...

    async def set(
        self,
        key: str,
        value: str,
        ttl: int | None = None,
    ) -> Result[None, DomainError]:
        """Set raw value, replacing any previous value and TTL.

        Args:
            key: Store key.
            value: Serialized value.
            ttl: Time to live in seconds (None = no expiration).

        Returns:
            Result with None on success.
        """
        ...

    async def delete(self, *keys: str) -> Result[int, DomainError]:
        """Delete keys.

        Args:
            *keys: Keys to delete.

        Returns:
            Result with number of keys that existed and were removed.
        """
        ...

    async def exists(self, key: str) -> Result[bool, DomainError]:
        """Check if key exists (and is not expired)."""
        ...

    async def expire(self, key: str, seconds: int) -> Result[bool, DomainError]:
        """Set expiration on key.

        Returns:
            Result with True if timeout was set, False if key doesn't exist.
        """
        ...

    async def ttl(self, key: str) -> Result[int | None, DomainError]:
        """Get remaining time to live.

        Returns:
            Result with seconds until expiration, None if no TTL or no key.
        """
        ...

    async def keys(self, pattern: str) -> Result[list[str], DomainError]:
        """List keys matching a glob pattern.

        Note:
            O(total keys). Acceptable at current scale; a per-owner index
            would be needed to avoid full scans.
        """
        ...

    async def increment(self, key: str, amount: int = 1) -> Result[int, DomainError]:
        """Atomically increment an integer value.

        Missing keys start at 0. An existing TTL is preserved.

        Returns:
            Result with the value after increment.
        """
        ...

    async def mget(self, keys: list[str]) -> Result[list[str | None], DomainError]:
        """Get several raw values at once (None for each miss)."""
        ...

    async def ping(self) -> Result[bool, DomainError]:
        """Check store connectivity (health check)."""
        ...
