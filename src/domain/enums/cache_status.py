"""Response cache status values (X-Cache header)."""

from enum import Enum


class CacheStatus(str, Enum):
    """Outcome of a response cache lookup."""

    HIT = "HIT"
    MISS = "MISS"
