"""Application service factories."""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.container.infrastructure import get_logger, get_response_cache

if TYPE_CHECKING:
    from src.application.services.cache_invalidation_service import (
        CacheInvalidationService,
    )


@lru_cache()
def get_cache_invalidation_service() -> "CacheInvalidationService":
    """Get cache invalidation service singleton (app-scoped).

    Usage:
        service: CacheInvalidationService = Depends(get_cache_invalidation_service)
        await service.on_progress_update(user_id, node_id)
    """
    from src.application.services.cache_invalidation_service import (
        CacheInvalidationService,
    )

    return CacheInvalidationService(get_response_cache(), get_logger())
