"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Key-value store errors
    STORE_UNAVAILABLE = "store_unavailable"
    STORE_OPERATION_FAILED = "store_operation_failed"
