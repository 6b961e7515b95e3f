"""Key-value store, response cache and session store.

All instances are managed through src.core.container.

Architecture:
- RedisAdapter / MemoryAdapter: KeyValueAdapterProtocol implementations
- KeyValueStore: fail-soft JSON facade used by everything above
- ResponseCache, CacheKeys, CacheTTL: response memoization
- SessionStore: server-side sessions
"""

from src.infrastructure.cache.cache_keys import (
    CacheKeys,
    CacheTTL,
    escape_glob,
    namespace_from_key,
)
from src.infrastructure.cache.factory import create_key_value_store
from src.infrastructure.cache.key_value_store import KeyValueStore
from src.infrastructure.cache.memory_adapter import MemoryAdapter
from src.infrastructure.cache.redis_adapter import RedisAdapter
from src.infrastructure.cache.response_cache import ResponseCache
from src.infrastructure.cache.session_store import SessionStore

__all__ = [
    "CacheKeys",
    "CacheTTL",
    "KeyValueStore",
    "MemoryAdapter",
    "RedisAdapter",
    "ResponseCache",
    "SessionStore",
    "create_key_value_store",
    "escape_glob",
    "namespace_from_key",
]
