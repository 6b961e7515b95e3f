"""Rate limiting infrastructure.

Exports:
    WindowCounterRateLimiter: RateLimitProtocol implementation
    RATE_LIMIT_POLICIES: Named policy registry
    resolve_identity: Request -> rate limit identity
"""

from src.infrastructure.rate_limit.identity import (
    ANONYMOUS_IDENTITY,
    get_client_ip,
    resolve_identity,
)
from src.infrastructure.rate_limit.policies import RATE_LIMIT_POLICIES, get_policy
from src.infrastructure.rate_limit.window_counter_adapter import (
    WindowCounterRateLimiter,
)

__all__ = [
    "ANONYMOUS_IDENTITY",
    "RATE_LIMIT_POLICIES",
    "WindowCounterRateLimiter",
    "get_client_ip",
    "get_policy",
    "resolve_identity",
]
