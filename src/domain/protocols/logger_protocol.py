"""LoggerProtocol definition for structured logging.

Every component in the store, rate limit and session layers logs through this
protocol so the backend (structlog today) can change without touching them.

Log Levels:
    - DEBUG: cache hits/misses, key construction
    - INFO: store mode selection, session lifecycle, cleanup totals
    - WARNING: store failures converted to safe defaults, fail-open decisions
    - ERROR: unexpected failures in best-effort work (invalidation callbacks)
    - CRITICAL: reserved

Security:
    - NEVER log session ids in full, tokens, or store credentials

Usage:
    from src.core.container import get_logger

    logger = get_logger()
    logger.warning("Store operation failed", operation="get", key=key)

    request_logger = logger.bind(trace_id=trace_id)
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    """Protocol for structured logging adapters.

    All logging calls MUST be structured: message + key-value context.
    """

    def debug(self, message: str, /, **context: Any) -> None:
        """Log a debug-level message."""
        ...

    def info(self, message: str, /, **context: Any) -> None:
        """Log an info-level message."""
        ...

    def warning(self, message: str, /, **context: Any) -> None:
        """Log a warning-level message."""
        ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log an error-level message with optional exception details.

        Args:
            message: Human-readable message (avoid f-strings; use context).
            error: Optional exception instance; implementations add
                error_type and error_message fields.
            **context: Structured key-value context fields.
        """
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log a critical-level message."""
        ...

    def bind(self, **context: Any) -> "LoggerProtocol":
        """Return new logger with permanently bound context.

        Original logger instance remains unchanged.
        """
        ...
