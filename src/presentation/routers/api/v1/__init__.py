"""API v1 routers.

Resources:
    /api/v1/sessions            - Server-side sessions
    /api/v1/health/cache        - Key-value store health
    /api/v1/rate-limit/test     - Rate limit probe
    /api/v1/rate-limit/policies - Policy registry (cached)
    /api/v1/maintenance/cleanup - Scheduled cleanup
"""

from fastapi import APIRouter

from src.core.config import settings
from src.presentation.routers.api.v1.health import router as health_router
from src.presentation.routers.api.v1.maintenance import router as maintenance_router
from src.presentation.routers.api.v1.rate_limit import router as rate_limit_router
from src.presentation.routers.api.v1.sessions import router as sessions_router

v1_router = APIRouter(prefix=settings.api_v1_prefix)

v1_router.include_router(sessions_router)
v1_router.include_router(health_router)
v1_router.include_router(rate_limit_router)
v1_router.include_router(maintenance_router)

__all__ = [
    "health_router",
    "maintenance_router",
    "rate_limit_router",
    "sessions_router",
    "v1_router",
]
