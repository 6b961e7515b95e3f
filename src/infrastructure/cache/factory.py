"""Key-value store factory.

Picks the backend once, from configuration presence:

- REDIS_URL and REDIS_TOKEN both set: RedisAdapter over a pooled client
- either missing: MemoryAdapter (memory mode, documented, not an error)

Building the Redis client does not open a connection; the pool connects on
the first command, so an unreachable store never fails process boot.
"""

from redis.asyncio import ConnectionPool, Redis

from src.core.config import Settings
from src.domain.enums import StoreBackend
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.cache.key_value_store import KeyValueStore
from src.infrastructure.cache.memory_adapter import MemoryAdapter
from src.infrastructure.cache.redis_adapter import RedisAdapter


def build_redis_client(settings: Settings) -> Redis:
    """Create a pooled async Redis client from settings (no I/O).

    Args:
        settings: Application settings with redis_url and redis_token.

    Returns:
        Redis: Client whose pool connects lazily.
    """
    pool = ConnectionPool.from_url(
        settings.redis_url,
        password=settings.redis_token,
        max_connections=settings.redis_max_connections,
        decode_responses=False,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=settings.redis_socket_timeout,
        retry_on_timeout=False,
        socket_keepalive=True,
    )
    return Redis(connection_pool=pool)


def create_key_value_store(
    settings: Settings,
    logger: LoggerProtocol,
) -> KeyValueStore:
    """Build the fail-soft store for the configured backend.

    Args:
        settings: Application settings.
        logger: Logger shared with the store facade.

    Returns:
        KeyValueStore over RedisAdapter or MemoryAdapter.
    """
    if settings.redis_configured:
        logger.info(
            "Key-value store using remote Redis",
            backend=StoreBackend.REDIS.value,
            socket_timeout=settings.redis_socket_timeout,
        )
        return KeyValueStore(
            RedisAdapter(build_redis_client(settings)),
            logger,
            backend=StoreBackend.REDIS,
        )

    logger.info(
        "Key-value store running in memory mode (REDIS_URL or REDIS_TOKEN unset)",
        backend=StoreBackend.MEMORY.value,
    )
    return KeyValueStore(MemoryAdapter(), logger, backend=StoreBackend.MEMORY)
