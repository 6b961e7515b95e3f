"""Health resource router (backing store checks).

Endpoints:
    GET /api/v1/health/cache - Key-value store round trip
"""

import time
from typing import Annotated
from uuid import uuid4

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.core.container import get_key_value_store, get_logger, get_rate_limiter
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.domain.protocols.rate_limit_protocol import RateLimitProtocol
from src.infrastructure.cache.key_value_store import KeyValueStore
from src.schemas.system_schemas import CacheHealthResponse

router = APIRouter(prefix="/health", tags=["Health"])

HEALTH_CHECK_TTL_SECONDS = 10


@router.get(
    "/cache",
    response_model=CacheHealthResponse,
    responses={503: {"model": CacheHealthResponse}},
    summary="Key-value store health",
)
async def cache_health(
    store: Annotated[KeyValueStore, Depends(get_key_value_store)],
    rate_limiter: Annotated[RateLimitProtocol, Depends(get_rate_limiter)],
    logger: Annotated[LoggerProtocol, Depends(get_logger)],
) -> JSONResponse:
    """Write, read back and delete a probe key.

    Returns 503 when any step fails.
    """
    key = f"health:check:{uuid4().hex}"
    probe = {"ok": True, "at": int(time.time() * 1000)}

    started = time.perf_counter()
    await store.set(key, probe, HEALTH_CHECK_TTL_SECONDS)
    read_back = await store.get(key)
    deleted = await store.delete(key)
    latency_ms = round((time.perf_counter() - started) * 1000, 3)

    healthy = read_back == probe and deleted == 1
    if not healthy:
        logger.warning(
            "Key-value store health check failed",
            backend=store.backend.value,
            read_back=read_back is not None,
            deleted=deleted,
        )

    body = CacheHealthResponse(
        status="healthy" if healthy else "unhealthy",
        mode=store.backend.value,
        latency_ms=latency_ms,
        rate_limiting_enabled=getattr(rate_limiter, "enabled", False),
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK
        if healthy
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
