"""System router for non-versioned application endpoints.

Lightweight, side-effect free endpoints for load balancers and diagnostics.
"""

from fastapi import APIRouter

from src.core.config import settings

system_router = APIRouter(tags=["System"])


@system_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint - basic status check."""
    return {
        "message": f"{settings.app_name} API",
        "status": "operational",
        "version": settings.app_version,
    }


@system_router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check. Does not touch the key-value store."""
    return {"status": "healthy"}
