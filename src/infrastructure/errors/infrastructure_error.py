"""Infrastructure layer error types.

Infrastructure errors represent failures of the backing key-value store.

Architecture:
- Adapters catch exceptions and map them to CacheError
- Infrastructure errors inherit from DomainError (not Exception)
- InfrastructureErrorCode records the store-level failure kind
- Used with Result types; the fail-soft store turns them into safe defaults
"""

from dataclasses import dataclass
from typing import Any

from src.core.errors import DomainError
from src.infrastructure.enums import InfrastructureErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class InfrastructureError(DomainError):
    """Base infrastructure error.

    Attributes:
        code: Domain ErrorCode.
        message: Human-readable message.
        infrastructure_code: Original infrastructure error code.
        details: Additional context.
    """

    infrastructure_code: InfrastructureErrorCode | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheError(InfrastructureError):
    """Key-value store errors.

    Wraps Redis exceptions (connection refused, auth failure, timeout) and
    serialization problems.

    Attributes:
        code: Domain ErrorCode.
        message: Human-readable message.
        infrastructure_code: Store-specific error code.
        details: Additional context (key, operation, original error).
    """

    pass
