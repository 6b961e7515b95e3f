"""Session domain entity for server-side sessions.

Pure business logic, no framework dependencies.

The backing store owns the canonical copy of a session; the client only holds
the opaque id in an HttpOnly cookie. Timestamps are epoch milliseconds so the
stored JSON stays language-neutral.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True, kw_only=True)
class Session:
    """Server-side session entity.

    Business Rules:
        - ``expires_at`` is always ``updated_at + ttl``
        - An expired session is equivalent to no session
        - ``id`` and ``created_at`` never change after creation

    Attributes:
        id: Opaque random token (64 hex chars).
        user_id: Owning user, None for anonymous sessions.
        data: Arbitrary JSON-serializable session data.
        created_at: Creation time (epoch ms).
        updated_at: Last write time (epoch ms).
        expires_at: Expiry time (epoch ms).

    Example:
        >>> session = Session.new("ab" * 32, user_id="42", ttl_seconds=60, now_ms=0)
        >>> session.expires_at
        60000
        >>> session.is_expired(now_ms=60001)
        True
    """

    id: str
    user_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    created_at: int
    updated_at: int
    expires_at: int

    @classmethod
    def new(
        cls,
        session_id: str,
        *,
        user_id: str | None,
        ttl_seconds: int,
        now_ms: int,
        data: dict[str, Any] | None = None,
    ) -> "Session":
        """Build a fresh session stamped at ``now_ms``."""
        return cls(
            id=session_id,
            user_id=user_id,
            data=dict(data or {}),
            created_at=now_ms,
            updated_at=now_ms,
            expires_at=now_ms + ttl_seconds * 1000,
        )

    def is_expired(self, *, now_ms: int) -> bool:
        """Check whether the session is past its expiry time.

        Args:
            now_ms: Current time in epoch milliseconds.

        Returns:
            bool: True if expired.
        """
        return self.expires_at < now_ms

    def touch(self, *, ttl_seconds: int, now_ms: int) -> None:
        """Record a write: bump ``updated_at`` and slide ``expires_at``."""
        self.updated_at = now_ms
        self.expires_at = now_ms + ttl_seconds * 1000

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage (camelCase keys, shared with non-Python readers)."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "data": self.data,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "expiresAt": self.expires_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Session":
        """Deserialize a stored session.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If a field has the wrong shape.
            ValueError: If a timestamp is not numeric.
        """
        data = raw.get("data") or {}
        if not isinstance(data, dict):
            raise TypeError("session data must be an object")
        user_id = raw.get("userId")
        return cls(
            id=str(raw["id"]),
            user_id=str(user_id) if user_id is not None else None,
            data=data,
            created_at=int(raw["createdAt"]),
            updated_at=int(raw["updatedAt"]),
            expires_at=int(raw["expiresAt"]),
        )
