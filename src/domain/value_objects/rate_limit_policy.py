"""Rate limit policy value objects.

A policy is a named quota: at most ``max_requests`` per ``window_seconds`` for
one client identity. Policies are static configuration, built once at import
time and never mutated.

Usage:
    from src.domain.value_objects.rate_limit_policy import RateLimitPolicy

    policy = RateLimitPolicy(name="quiz", window_seconds=3600, max_requests=10)
"""

import math
from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitPolicy:
    """Rate limit policy configuration (value object).

    Window Counter Algorithm:
        - First request in a window creates the counter with TTL = window
        - Every request increments the counter atomically
        - Requests beyond ``max_requests`` are denied until the key expires

    Attributes:
        name: Policy name used in counter keys (e.g. "api-moderate").
        window_seconds: Window length in seconds.
        max_requests: Requests allowed per identity per window.

    Raises:
        ValueError: If name is blank or any numeric field is not positive.
    """

    name: str
    window_seconds: int
    max_requests: int

    def __post_init__(self) -> None:
        """Validate policy configuration after initialization.

        Raises:
            ValueError: If any field is invalid.
        """
        if not self.name or not self.name.strip():
            raise ValueError("policy name must not be blank")
        if self.window_seconds <= 0:
            raise ValueError(
                f"window_seconds must be positive, got {self.window_seconds}"
            )
        if self.max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {self.max_requests}")


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitDecision:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Policy maximum per window (X-RateLimit-Limit).
        remaining: Requests left in the current window (X-RateLimit-Remaining).
        reset_at: Epoch milliseconds when the window resets (X-RateLimit-Reset).
        enforced: False when limiting is disabled or failed open; such
            decisions carry no rate limit headers.
    """

    allowed: bool
    limit: int = 0
    remaining: int = 0
    reset_at: int = 0
    enforced: bool = True

    @classmethod
    def unenforced(cls) -> "RateLimitDecision":
        """Fail-open decision: allow, no headers."""
        return cls(allowed=True, enforced=False)

    def retry_after_seconds(self, now_ms: int) -> int:
        """Seconds until the window resets, rounded up, at least 1.

        Args:
            now_ms: Current time in epoch milliseconds.

        Returns:
            int: Value for the Retry-After header and 429 body.
        """
        return max(1, math.ceil((self.reset_at - now_ms) / 1000))

    def reset_at_iso(self) -> str:
        """Reset timestamp as ISO-8601 UTC (X-RateLimit-Reset header)."""
        return (
            datetime.fromtimestamp(self.reset_at / 1000, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

    def headers(self) -> dict[str, str]:
        """Standard rate limit headers, empty for unenforced decisions."""
        if not self.enforced:
            return {}
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at_iso(),
        }
