"""Rate limit policy registry.

Named quotas referenced by RequestGuard and the rate limiter. Built once at
import time; invalid values fail at import (RateLimitPolicy validation).

Usage:
    from src.infrastructure.rate_limit.policies import RATE_LIMIT_POLICIES

    policy = RATE_LIMIT_POLICIES["quiz"]  # 10 requests / hour
"""

from types import MappingProxyType

from src.domain.value_objects.rate_limit_policy import RateLimitPolicy

_POLICIES = (
    RateLimitPolicy(name="auth", max_requests=5, window_seconds=60),
    RateLimitPolicy(name="auth-verification", max_requests=3, window_seconds=600),
    RateLimitPolicy(name="api-strict", max_requests=10, window_seconds=60),
    RateLimitPolicy(name="api-moderate", max_requests=30, window_seconds=60),
    RateLimitPolicy(name="api-relaxed", max_requests=100, window_seconds=60),
    RateLimitPolicy(name="notifications", max_requests=5, window_seconds=300),
    RateLimitPolicy(name="comments", max_requests=30, window_seconds=3600),
    RateLimitPolicy(name="quiz", max_requests=10, window_seconds=3600),
)

# Read-only view: policies are never mutated at runtime
RATE_LIMIT_POLICIES: MappingProxyType[str, RateLimitPolicy] = MappingProxyType(
    {policy.name: policy for policy in _POLICIES}
)


def get_policy(name: str) -> RateLimitPolicy | None:
    """Look up a policy by name.

    Args:
        name: Policy name (e.g. "api-moderate").

    Returns:
        RateLimitPolicy, or None for unknown names.
    """
    return RATE_LIMIT_POLICIES.get(name)
