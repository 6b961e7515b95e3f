"""Maintenance router (scheduled jobs).

Endpoints:
    POST /api/v1/maintenance/cleanup - Expired session cleanup and stale
        cache invalidation. Requires X-Cron-Secret when CRON_SECRET is set.
"""

import secrets
from typing import Annotated

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse

from src.application.services.cache_invalidation_service import (
    CacheInvalidationService,
)
from src.core.config import settings
from src.core.container import (
    get_cache_invalidation_service,
    get_logger,
    get_session_store,
)
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.cache.session_store import SessionStore
from src.schemas.system_schemas import MaintenanceCleanupResponse

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


@router.post(
    "/cleanup",
    response_model=MaintenanceCleanupResponse,
    summary="Run periodic cleanup",
)
async def run_cleanup(
    sessions: Annotated[SessionStore, Depends(get_session_store)],
    invalidation: Annotated[
        CacheInvalidationService, Depends(get_cache_invalidation_service)
    ],
    logger: Annotated[LoggerProtocol, Depends(get_logger)],
    x_cron_secret: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    if settings.cron_secret and not (
        x_cron_secret and secrets.compare_digest(x_cron_secret, settings.cron_secret)
    ):
        logger.warning("Maintenance request with invalid cron secret")
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid cron secret"},
        )

    removed = await sessions.cleanup_expired_sessions()
    await invalidation.invalidate_stale_data()

    logger.info("Maintenance cleanup completed", expired_sessions_removed=removed)
    return JSONResponse(
        content=MaintenanceCleanupResponse(
            expired_sessions_removed=removed,
            stale_data_invalidated=True,
        ).model_dump()
    )
