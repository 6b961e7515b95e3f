"""Request/response schemas for API endpoints.

Schemas are kept separate from domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import SessionCreateRequest, SessionResponse
"""

from src.schemas.session_schemas import (
    SessionCreateRequest,
    SessionDataResponse,
    SessionDataUpdateRequest,
    SessionResponse,
)
from src.schemas.system_schemas import (
    CacheHealthResponse,
    MaintenanceCleanupResponse,
    RateLimitPolicyResponse,
    RateLimitProbeResponse,
)

__all__ = [
    "CacheHealthResponse",
    "MaintenanceCleanupResponse",
    "RateLimitPolicyResponse",
    "RateLimitProbeResponse",
    "SessionCreateRequest",
    "SessionDataResponse",
    "SessionDataUpdateRequest",
    "SessionResponse",
]
