"""Domain value objects (immutable).

Usage:
    from src.domain.value_objects import RateLimitDecision, RateLimitPolicy
"""

from src.domain.value_objects.rate_limit_policy import (
    RateLimitDecision,
    RateLimitPolicy,
)

__all__ = ["RateLimitDecision", "RateLimitPolicy"]
