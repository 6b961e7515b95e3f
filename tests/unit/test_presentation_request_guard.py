"""Unit tests for RequestGuard (rate limit + response cache composition).

Tests cover:
- 429 rejection with Retry-After and X-RateLimit-* headers
- Cache HIT/MISS flow for GET requests
- Skip predicate and non-cacheable responses
- Write-path invalidation
- Handler exceptions propagating unchanged
"""

from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse

from src.domain.value_objects.rate_limit_policy import RateLimitDecision
from src.infrastructure.cache.cache_keys import CacheKeys
from src.infrastructure.rate_limit.window_counter_adapter import (
    WindowCounterRateLimiter,
)
from src.presentation.routers.api.middleware.request_guard import (
    RATE_LIMIT_ERROR_MESSAGE,
    RequestGuard,
    build_rate_limit_response,
    default_identity,
    force_refresh,
)


def _request(
    method: str = "GET",
    path: str = "/api/v1/nodes",
    query: bytes = b"",
    client: tuple[str, int] | None = ("10.0.0.1", 5000),
) -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query,
            "headers": [],
            "client": client,
        }
    )


@pytest.fixture
def limiter(memory_store, mock_logger):
    return WindowCounterRateLimiter(store=memory_store, logger=mock_logger)


@pytest.fixture
def handler():
    """Handler building a fresh JSON response per call."""
    return AsyncMock(side_effect=lambda request: JSONResponse({"items": [1, 2]}))


@pytest.fixture
def make_guard(limiter, response_cache, mock_logger):
    def factory(policy="api-moderate", **kwargs):
        return RequestGuard(
            policy=policy,
            rate_limiter=limiter,
            response_cache=response_cache,
            logger=mock_logger,
            **kwargs,
        )

    return factory


@pytest.mark.unit
class TestRequestGuardRateLimit:
    """Test rate limit stage."""

    @pytest.mark.asyncio
    async def test_allowed_response_carries_rate_headers(self, make_guard, handler):
        response = await make_guard()(_request(), handler)

        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "30"
        assert response.headers["X-RateLimit-Remaining"] == "29"
        assert response.headers["X-RateLimit-Reset"].endswith("Z")

    @pytest.mark.asyncio
    async def test_sixth_auth_request_is_rejected(self, make_guard, handler):
        """Should short-circuit with 429 without calling the handler."""
        guard = make_guard(policy="auth")
        for _ in range(5):
            await guard(_request(method="POST"), handler)
        handler.reset_mock()

        response = await guard(_request(method="POST"), handler)

        assert response.status_code == 429
        handler.assert_not_awaited()
        body = response.body.decode()
        assert RATE_LIMIT_ERROR_MESSAGE in body
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_unenforced_decision_adds_no_headers(
        self, response_cache, mock_logger, handler
    ):
        limiter = AsyncMock()
        limiter.check = AsyncMock(return_value=RateLimitDecision.unenforced())
        guard = RequestGuard(
            policy="auth",
            rate_limiter=limiter,
            response_cache=response_cache,
            logger=mock_logger,
        )

        response = await guard(_request(), handler)

        assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers

    @pytest.mark.asyncio
    async def test_custom_identity_function(self, make_guard, handler, limiter):
        guard = make_guard(policy="auth", identity=lambda request: "user:7")

        await guard(_request(), handler)

        assert (await limiter.check("auth", "user:7")).remaining == 3

    def test_build_rate_limit_response(self):
        decision = RateLimitDecision(
            allowed=False, limit=5, remaining=0, reset_at=1_000_000 + 42_500
        )

        response = build_rate_limit_response(decision, now_ms=1_000_000)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "43"
        assert b'"retryAfter":43' in response.body


@pytest.mark.unit
class TestRequestGuardCache:
    """Test response cache stage."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self, make_guard, handler):
        guard = make_guard(cache_ttl=300)

        first = await guard(_request(query=b"page=2&limit=10"), handler)
        second = await guard(_request(query=b"limit=10&page=2"), handler)

        assert first.headers["X-Cache"] == "MISS"
        assert first.headers["X-Cache-TTL"] == "300"
        assert second.headers["X-Cache"] == "HIT"
        assert second.headers["X-Cache-Key"] == first.headers["X-Cache-Key"]
        assert second.body == first.body
        handler.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hit_keeps_ttl_header(self, make_guard, handler):
        guard = make_guard(cache_ttl=300)

        await guard(_request(), handler)
        hit = await guard(_request(), handler)

        assert hit.status_code == 200
        assert hit.headers["X-Cache-TTL"] == "300"

    @pytest.mark.asyncio
    async def test_encoded_separators_do_not_share_an_entry(self, make_guard, handler):
        """?a=1%26b%3D2 and ?a=1&b=2 are different requests."""
        guard = make_guard(cache_ttl=300)

        packed = await guard(_request(query=b"a=1%26b%3D2"), handler)
        split = await guard(_request(query=b"a=1&b=2"), handler)

        assert packed.headers["X-Cache"] == "MISS"
        assert split.headers["X-Cache"] == "MISS"
        assert packed.headers["X-Cache-Key"] != split.headers["X-Cache-Key"]
        assert handler.await_count == 2

    @pytest.mark.asyncio
    async def test_cached_entry_expires(self, make_guard, handler, clock):
        guard = make_guard(cache_ttl=60)

        await guard(_request(), handler)
        clock.advance(60)
        response = await guard(_request(), handler)

        assert response.headers["X-Cache"] == "MISS"
        assert handler.await_count == 2

    @pytest.mark.asyncio
    async def test_no_ttl_means_no_caching(self, make_guard, handler):
        guard = make_guard()

        await guard(_request(), handler)
        response = await guard(_request(), handler)

        assert "X-Cache" not in response.headers
        assert handler.await_count == 2

    @pytest.mark.asyncio
    async def test_skip_predicate_bypasses_cache(self, make_guard, handler):
        guard = make_guard(cache_ttl=300, skip_cache=force_refresh)

        await guard(_request(), handler)
        response = await guard(_request(query=b"refresh=true"), handler)

        assert "X-Cache" not in response.headers
        assert handler.await_count == 2

    @pytest.mark.asyncio
    async def test_error_response_not_cached(self, make_guard, response_cache):
        handler = AsyncMock(
            return_value=JSONResponse({"detail": "nope"}, status_code=404)
        )
        guard = make_guard(cache_ttl=300)

        await guard(_request(), handler)

        assert await response_cache.get(CacheKeys.request("/api/v1/nodes", [])) is None

    @pytest.mark.asyncio
    async def test_non_200_success_not_cached(self, make_guard, response_cache):
        handler = AsyncMock(
            side_effect=lambda request: JSONResponse({"queued": True}, status_code=202)
        )
        guard = make_guard(cache_ttl=300)

        first = await guard(_request(), handler)
        second = await guard(_request(), handler)

        assert "X-Cache" not in first.headers
        assert second.status_code == 202
        assert handler.await_count == 2
        assert await response_cache.get(CacheKeys.request("/api/v1/nodes", [])) is None

    @pytest.mark.asyncio
    async def test_non_json_response_not_cached(self, make_guard):
        handler = AsyncMock(return_value=PlainTextResponse("hello"))
        guard = make_guard(cache_ttl=300)

        response = await guard(_request(), handler)

        assert "X-Cache" not in response.headers

    @pytest.mark.asyncio
    async def test_post_never_touches_cache(self, make_guard, handler, response_cache):
        guard = make_guard(cache_ttl=300)

        await guard(_request(method="POST"), handler)

        assert await response_cache.invalidate_pattern("api:*") == []

    @pytest.mark.asyncio
    async def test_fixed_and_callable_cache_keys(self, make_guard, handler):
        fixed = make_guard(cache_ttl=60, cache_key=CacheKeys.leaderboard("weekly"))
        dynamic = make_guard(
            cache_ttl=60, cache_key=lambda request: CacheKeys.search("graphs")
        )

        assert fixed.build_cache_key(_request()) == "leaderboard:weekly"
        assert dynamic.build_cache_key(_request()) == "search:graphs"


@pytest.mark.unit
class TestRequestGuardWritePath:
    """Test invalidation after writes."""

    @pytest.mark.asyncio
    async def test_successful_write_runs_invalidation(self, make_guard, handler):
        invalidate = AsyncMock()
        guard = make_guard(invalidate=invalidate)

        await guard(_request(method="POST"), handler)

        invalidate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_write_skips_invalidation(self, make_guard):
        invalidate = AsyncMock()
        handler = AsyncMock(return_value=JSONResponse({}, status_code=400))
        guard = make_guard(invalidate=invalidate)

        await guard(_request(method="POST"), handler)

        invalidate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidation_error_is_logged_not_raised(
        self, make_guard, handler, mock_logger
    ):
        guard = make_guard(invalidate=AsyncMock(side_effect=RuntimeError("boom")))

        response = await guard(_request(method="DELETE"), handler)

        assert response.status_code == 200
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_handler_exception_propagates(self, make_guard):
        handler = AsyncMock(side_effect=ValueError("bad input"))

        with pytest.raises(ValueError, match="bad input"):
            await make_guard(cache_ttl=60)(_request(), handler)


@pytest.mark.unit
class TestRequestGuardHelpers:
    """Test predicate and identity helpers."""

    def test_force_refresh(self):
        assert force_refresh(_request(query=b"refresh=true"))
        assert force_refresh(_request(query=b"refresh=TRUE"))
        assert not force_refresh(_request(query=b"refresh=1"))
        assert not force_refresh(_request())

    def test_default_identity_prefers_user_id(self):
        request = _request()
        request.state.user_id = "42"

        assert default_identity(request) == "user:42"

    def test_default_identity_falls_back_to_ip(self):
        assert default_identity(_request()) == "ip:10.0.0.1"
