"""Domain enums.

Usage:
    from src.domain.enums import CacheStatus, StoreBackend
"""

from src.domain.enums.cache_status import CacheStatus
from src.domain.enums.store_backend import StoreBackend

__all__ = ["CacheStatus", "StoreBackend"]
