"""Result types for railway-oriented programming.

Store adapters never raise: every operation returns either a Success carrying
the value or a Failure carrying a DomainError. Callers decide the safe default.

Usage:
    result = await adapter.get("user:profile:42")
    match result:
        case Success(value=raw):
            payload = raw
        case Failure(error=err):
            logger.warning("Store read failed", error=str(err))
"""

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


# Type alias for Result union
Result: TypeAlias = Success[T] | Failure[E]
