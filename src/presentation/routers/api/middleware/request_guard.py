"""Request guard: rate limiting and response caching around a handler.

Per-request flow:

    RECEIVED -> RATE_CHECKED -> REJECTED                      (429, terminal)
                             -> CACHE_CHECKED -> CACHE_HIT_RETURNED
                             -> HANDLER_INVOKED -> CACHED_AND_RETURNED
                                                -> RETURNED

- Only GET requests touch the cache; a skip predicate can bypass it
- Only 200 JSON responses are cached, so a HIT replays as a 200
- Writes (non-GET 2xx) run the ``invalidate`` callback before returning
- Every response from an enforced decision carries X-RateLimit-* headers
- Exceptions raised by the handler propagate unchanged

Usage:
    @router.get("/nodes/{node_id}/comments")
    @guarded("api-moderate", cache_ttl=CacheTTL.MEDIUM, skip_cache=force_refresh)
    async def list_comments(request: Request, node_id: str) -> Response:
        ...
"""

from __future__ import annotations

import functools
import json
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from fastapi.encoders import jsonable_encoder
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from src.core.container import get_logger, get_rate_limiter, get_response_cache
from src.domain.enums import CacheStatus
from src.infrastructure.cache.cache_keys import CacheKeys, namespace_from_key
from src.infrastructure.rate_limit.identity import resolve_identity

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
    from src.domain.value_objects.rate_limit_policy import RateLimitDecision
    from src.infrastructure.cache.response_cache import ResponseCache

Handler = Callable[[Request], Awaitable[Response]]
RequestPredicate = Callable[[Request], bool]

RATE_LIMIT_ERROR_MESSAGE = "Too many requests. Please try again later."


def force_refresh(request: Request) -> bool:
    """Skip-cache predicate: true when the query has ``refresh=true``."""
    return request.query_params.get("refresh", "").lower() == "true"


def default_identity(request: Request) -> str:
    """Identity from ``request.state.user_id`` when set, else client IP."""
    return resolve_identity(request, getattr(request.state, "user_id", None))


def build_rate_limit_response(decision: RateLimitDecision, now_ms: int) -> JSONResponse:
    """Standard 429 response for a denied decision.

    Args:
        decision: Denied rate limit decision.
        now_ms: Current time in epoch milliseconds.

    Returns:
        JSONResponse: 429 with ``error``/``retryAfter`` body, Retry-After and
            X-RateLimit-* headers.
    """
    retry_after = decision.retry_after_seconds(now_ms)
    return JSONResponse(
        status_code=429,
        content={"error": RATE_LIMIT_ERROR_MESSAGE, "retryAfter": retry_after},
        headers={"Retry-After": str(retry_after), **decision.headers()},
    )


def _json_body(response: Response) -> Any:
    """Decoded JSON body of a buffered response, None if not cacheable."""
    media_type = response.headers.get("content-type", "")
    body = getattr(response, "body", None)
    if not body or not media_type.startswith("application/json"):
        return None
    try:
        return json.loads(body)
    except (TypeError, ValueError):
        return None


class RequestGuard:
    """Composes a rate limit policy and the response cache around a handler.

    Args:
        policy: Rate limit policy name (e.g. "api-moderate").
        rate_limiter: RateLimitProtocol implementation.
        response_cache: Response cache.
        logger: Structured logger.
        cache_ttl: Cache lifetime for GET responses; None disables caching.
        cache_key: Fixed key or key function; defaults to the request key
            (path plus sorted query string).
        skip_cache: Predicate bypassing the cache for a request.
        invalidate: Callback run after a successful write, before returning.
        identity: Identity function; defaults to user id or client IP.
    """

    def __init__(
        self,
        *,
        policy: str,
        rate_limiter: RateLimitProtocol,
        response_cache: ResponseCache,
        logger: LoggerProtocol,
        cache_ttl: int | None = None,
        cache_key: str | Callable[[Request], str] | None = None,
        skip_cache: RequestPredicate | None = None,
        invalidate: Callable[[Request], Awaitable[object]] | None = None,
        identity: Callable[[Request], str] | None = None,
    ) -> None:
        self.policy = policy
        self._rate_limiter = rate_limiter
        self._cache = response_cache
        self._logger = logger
        self._cache_ttl = cache_ttl
        self._cache_key = cache_key
        self._skip_cache = skip_cache
        self._invalidate = invalidate
        self._identity = identity or default_identity

    def build_cache_key(self, request: Request) -> str:
        if callable(self._cache_key):
            return self._cache_key(request)
        if self._cache_key:
            return self._cache_key
        return CacheKeys.request(request.url.path, request.query_params.multi_items())

    def _is_cacheable(self, request: Request) -> bool:
        if request.method != "GET" or self._cache_ttl is None:
            return False
        return not (self._skip_cache is not None and self._skip_cache(request))

    async def __call__(self, request: Request, handler: Handler) -> Response:
        """Run the guarded request.

        Args:
            request: Incoming request.
            handler: Wrapped handler producing the real response.

        Returns:
            Response: 429, cached payload, or the handler's response.
        """
        # RECEIVED -> RATE_CHECKED
        identity = self._identity(request)
        decision = await self._rate_limiter.check(self.policy, identity)

        # RATE_CHECKED -> REJECTED
        if not decision.allowed:
            self._logger.info(
                "Request rejected by rate limit",
                policy=self.policy,
                identity=identity,
                path=request.url.path,
            )
            return build_rate_limit_response(decision, int(time.time() * 1000))

        rate_headers = decision.headers()
        cacheable = self._is_cacheable(request)
        cache_key = self.build_cache_key(request) if cacheable else None

        # RATE_CHECKED -> CACHE_CHECKED -> CACHE_HIT_RETURNED
        if cache_key is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return JSONResponse(
                    content=cached,
                    headers={
                        **rate_headers,
                        "X-Cache": CacheStatus.HIT.value,
                        "X-Cache-Key": cache_key,
                        "X-Cache-TTL": str(self._cache_ttl),
                    },
                )

        # HANDLER_INVOKED
        response = await handler(request)
        succeeded = 200 <= response.status_code < 300

        # HANDLER_INVOKED -> CACHED_AND_RETURNED
        if cache_key is not None and response.status_code == 200:
            payload = _json_body(response)
            if payload is not None:
                await self._cache.set(cache_key, payload, self._cache_ttl)
                response.headers["X-Cache"] = CacheStatus.MISS.value
                response.headers["X-Cache-Key"] = cache_key
                response.headers["X-Cache-TTL"] = str(self._cache_ttl)
                self._logger.debug(
                    "Response cached",
                    namespace=namespace_from_key(cache_key),
                    ttl=self._cache_ttl,
                )

        # Write path: invalidate before the response is observable
        if request.method != "GET" and succeeded and self._invalidate is not None:
            try:
                await self._invalidate(request)
            except Exception as e:
                self._logger.error(
                    "Cache invalidation after write failed",
                    error=e,
                    policy=self.policy,
                    path=request.url.path,
                )

        # HANDLER_INVOKED -> RETURNED
        for name, value in rate_headers.items():
            response.headers[name] = value
        return response


def guarded(
    policy: str,
    *,
    cache_ttl: int | None = None,
    cache_key: str | Callable[[Request], str] | None = None,
    skip_cache: RequestPredicate | None = None,
    invalidate: Callable[[Request], Awaitable[object]] | None = None,
    identity: Callable[[Request], str] | None = None,
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Response]]]:
    """Decorate a FastAPI route with a RequestGuard.

    The route must declare a ``request: Request`` parameter. Non-Response
    return values are JSON-encoded. Guard collaborators come from the
    container at call time.
    """

    def decorator(
        endpoint: Callable[..., Awaitable[Any]],
    ) -> Callable[..., Awaitable[Response]]:
        @functools.wraps(endpoint)
        async def wrapper(*args: Any, **kwargs: Any) -> Response:
            request = kwargs.get("request")
            if not isinstance(request, Request):
                request = next(arg for arg in args if isinstance(arg, Request))

            async def handler(_: Request) -> Response:
                result = await endpoint(*args, **kwargs)
                if isinstance(result, Response):
                    return result
                return JSONResponse(content=jsonable_encoder(result))

            guard = RequestGuard(
                policy=policy,
                rate_limiter=get_rate_limiter(),
                response_cache=get_response_cache(),
                logger=get_logger(),
                cache_ttl=cache_ttl,
                cache_key=cache_key,
                skip_cache=skip_cache,
                invalidate=invalidate,
                identity=identity,
            )
            return await guard(request, handler)

        return wrapper

    return decorator
