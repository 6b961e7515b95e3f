"""Unit tests for TraceMiddleware (request tracing).

Tests cover:
- Trace ID generation for new requests
- Trace ID reuse from the X-Trace-Id header
- get_trace_id() inside and outside a request
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.presentation.routers.api.middleware.trace_middleware import (
    TraceMiddleware,
    get_trace_id,
)


@pytest.mark.unit
class TestTraceMiddleware:
    """Test TraceMiddleware trace ID handling."""

    @pytest.mark.asyncio
    async def test_generates_new_trace_id_when_missing(self):
        mock_request = MagicMock()
        mock_request.headers = {}
        mock_response = MagicMock()
        mock_response.headers = {}
        middleware = TraceMiddleware(app=MagicMock())

        response = await middleware.dispatch(
            mock_request, AsyncMock(return_value=mock_response)
        )

        UUID(response.headers["X-Trace-Id"])

    @pytest.mark.asyncio
    async def test_uses_existing_trace_id_from_header(self):
        existing = "12345678-1234-5678-1234-567812345678"
        mock_request = MagicMock()
        mock_request.headers = {"X-Trace-Id": existing}
        mock_response = MagicMock()
        mock_response.headers = {}
        middleware = TraceMiddleware(app=MagicMock())

        response = await middleware.dispatch(
            mock_request, AsyncMock(return_value=mock_response)
        )

        assert response.headers["X-Trace-Id"] == existing

    @pytest.mark.asyncio
    async def test_trace_id_visible_during_request_only(self):
        seen = []
        mock_request = MagicMock()
        mock_request.headers = {"X-Trace-Id": "trace-abc"}
        mock_response = MagicMock()
        mock_response.headers = {}

        async def call_next(request):
            seen.append(get_trace_id())
            return mock_response

        await TraceMiddleware(app=MagicMock()).dispatch(mock_request, call_next)

        assert seen == ["trace-abc"]
        assert get_trace_id() is None
