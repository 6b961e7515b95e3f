"""Rate limit router.

Endpoints:
    GET /api/v1/rate-limit/test     - Guarded by the api-strict policy (10/min)
    GET /api/v1/rate-limit/policies - Registered policies (cached)
"""

from fastapi import APIRouter, Request

from src.infrastructure.cache.cache_keys import CacheTTL
from src.infrastructure.rate_limit.policies import RATE_LIMIT_POLICIES
from src.presentation.routers.api.middleware.request_guard import (
    default_identity,
    force_refresh,
    guarded,
)
from src.schemas.system_schemas import RateLimitPolicyResponse, RateLimitProbeResponse

router = APIRouter(prefix="/rate-limit", tags=["Rate Limit"])

PROBE_POLICY = "api-strict"


@router.get("/test", response_model=RateLimitProbeResponse)
@guarded(PROBE_POLICY)
async def rate_limit_test(request: Request) -> RateLimitProbeResponse:
    """Cheap endpoint for observing X-RateLimit-* headers and the 429."""
    return RateLimitProbeResponse(
        message="Request allowed",
        policy=PROBE_POLICY,
        identity=default_identity(request),
    )


@router.get("/policies", response_model=list[RateLimitPolicyResponse])
@guarded("api-relaxed", cache_ttl=CacheTTL.LONG, skip_cache=force_refresh)
async def list_rate_limit_policies(request: Request) -> list[RateLimitPolicyResponse]:
    """Registered policies. The registry only changes on deploy."""
    return [
        RateLimitPolicyResponse(
            name=policy.name,
            window_seconds=policy.window_seconds,
            max_requests=policy.max_requests,
        )
        for policy in RATE_LIMIT_POLICIES.values()
    ]
