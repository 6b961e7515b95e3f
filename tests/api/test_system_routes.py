"""API tests for system routes and store health."""

import asyncio

import pytest

from src.core.config import settings
from src.core.container import get_key_value_store


@pytest.mark.api
class TestSystemRoutes:
    """Non-versioned endpoints."""

    def test_root_endpoint_returns_status_and_version(self, client):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == f"{settings.app_name} API"
        assert data["status"] == "operational"
        assert data["version"] == settings.app_version

    def test_health_endpoint_returns_healthy_status(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_trace_id_header_on_every_response(self, client):
        response = client.get("/health", headers={"X-Trace-Id": "trace-123"})

        assert response.headers["X-Trace-Id"] == "trace-123"


@pytest.mark.api
class TestCacheHealth:
    """GET /api/v1/health/cache"""

    def test_memory_mode_is_healthy(self, client):
        response = client.get("/api/v1/health/cache")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["mode"] == "memory"
        assert data["rate_limiting_enabled"] is False
        assert data["latency_ms"] >= 0

    def test_health_check_key_is_removed(self, client):
        client.get("/api/v1/health/cache")

        keys = asyncio.run(get_key_value_store().keys("health:check:*"))
        assert keys == []
