"""Infrastructure-specific error codes.

Internal codes for tracking key-value store failures. They travel alongside
the domain ErrorCode inside CacheError so logs can tell a timeout from a
refused connection without parsing messages.
"""

from enum import Enum


class InfrastructureErrorCode(Enum):
    """Infrastructure-specific error codes for store operations."""

    CACHE_CONNECTION_ERROR = "cache_connection_error"
    CACHE_TIMEOUT = "cache_timeout"
    CACHE_GET_ERROR = "cache_get_error"
    CACHE_SET_ERROR = "cache_set_error"
    CACHE_DELETE_ERROR = "cache_delete_error"
    CACHE_SCAN_ERROR = "cache_scan_error"
    CACHE_INCREMENT_ERROR = "cache_increment_error"
