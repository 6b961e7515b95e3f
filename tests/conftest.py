"""Pytest configuration shared by unit and API tests.

This configuration ensures:
1. Settings load in the testing environment with the store in memory mode
2. Container singletons are rebuilt for every test (no shared store state)
3. Common fakes (logger, memory-backed store) are available as fixtures
"""

import os

# Must run before any src import: settings are read once at import time
os.environ["ENVIRONMENT"] = "testing"
os.environ.pop("REDIS_URL", None)
os.environ.pop("REDIS_TOKEN", None)
os.environ.pop("CRON_SECRET", None)

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from src.core.container import reset_container  # noqa: E402
from src.domain.enums import StoreBackend  # noqa: E402
from src.infrastructure.cache.key_value_store import KeyValueStore  # noqa: E402
from src.infrastructure.cache.memory_adapter import MemoryAdapter  # noqa: E402
from src.infrastructure.cache.response_cache import ResponseCache  # noqa: E402


class FakeClock:
    """Manually advanced clock (epoch seconds) for TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def fresh_container():
    """Drop memoized container singletons around every test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def mock_logger():
    """Create mock logger."""
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.critical = MagicMock()
    return logger


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_adapter(clock):
    return MemoryAdapter(clock=clock)


@pytest.fixture
def memory_store(memory_adapter, mock_logger):
    """Fail-soft store over an in-memory adapter with a fake clock."""
    return KeyValueStore(memory_adapter, mock_logger, backend=StoreBackend.MEMORY)


@pytest.fixture
def response_cache(memory_store, mock_logger):
    return ResponseCache(memory_store, mock_logger)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "api: API tests through the TestClient")
