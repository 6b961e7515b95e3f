"""Rate limit protocol (port) for window-counter rate limiting.

Following hexagonal architecture:
- Domain defines the PORT (this protocol)
- Infrastructure provides the ADAPTER (WindowCounterRateLimiter)
- Presentation (RequestGuard) uses the protocol

Usage:
    from src.core.container import get_rate_limiter

    decision = await get_rate_limiter().check("api-moderate", "ip:1.2.3.4")
    if not decision.allowed:
        # build 429
"""

from typing import Protocol

from src.domain.value_objects.rate_limit_policy import RateLimitDecision


class RateLimitProtocol(Protocol):
    """Protocol for rate limiting systems.

    Fail-Open Design:
        ``check`` MUST return an allowed decision if anything goes wrong.
        Rate limit infrastructure failures never cause denial of service.
    """

    async def check(self, policy_name: str, identity: str) -> RateLimitDecision:
        """Count one request and decide whether it is allowed.

        Args:
            policy_name: Registered policy name (e.g. "auth").
            identity: Resolved client identity (e.g. "user:42", "ip:1.2.3.4").

        Returns:
            RateLimitDecision (never raises).
        """
        ...

    async def reset(self, policy_name: str, identity: str) -> bool:
        """Delete the counter for (policy, identity).

        Returns:
            True if a counter was removed.
        """
        ...
