"""Key-value store backend types.

Selected once at startup by the store factory:
- REDIS when both REDIS_URL and REDIS_TOKEN are configured
- MEMORY otherwise (single-process, development and tests)
"""

from enum import Enum


class StoreBackend(str, Enum):
    """Backing store implementations."""

    REDIS = "redis"
    """Remote Redis shared by every process (production)."""

    MEMORY = "memory"
    """In-process dict with TTL tracking. Not shared across processes, so rate
    limiting is disabled in this mode."""
