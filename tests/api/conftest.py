"""Fixtures for API tests.

The app runs with the store in memory mode, where rate limiting is off.
Tests that need enforcement install an enabled limiter over the same store.
"""

import pytest
from fastapi.testclient import TestClient

from src.core.container import get_key_value_store, get_logger
from src.infrastructure.rate_limit.window_counter_adapter import (
    WindowCounterRateLimiter,
)
from src.main import app

REQUEST_GUARD = "src.presentation.routers.api.middleware.request_guard"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def enforced_rate_limits(monkeypatch):
    """Enable rate limiting for guarded routes (memory-backed counters)."""
    limiter = WindowCounterRateLimiter(
        store=get_key_value_store(), logger=get_logger(), enabled=True
    )
    monkeypatch.setattr(f"{REQUEST_GUARD}.get_rate_limiter", lambda: limiter)
    return limiter
