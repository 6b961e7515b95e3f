"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

Usage:
    from src.domain.protocols import KeyValueAdapterProtocol, LoggerProtocol
"""

from src.domain.protocols.key_value_adapter_protocol import KeyValueAdapterProtocol
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.rate_limit_protocol import RateLimitProtocol

__all__ = [
    "KeyValueAdapterProtocol",
    "LoggerProtocol",
    "RateLimitProtocol",
]
