"""System and maintenance response schemas."""

from pydantic import BaseModel, Field


class CacheHealthResponse(BaseModel):
    """Key-value store round-trip health."""

    status: str = Field(..., description="healthy or unhealthy")
    mode: str = Field(..., description="Store backend: redis or memory")
    latency_ms: float = Field(..., description="Write/read/delete round trip")
    rate_limiting_enabled: bool = Field(
        ..., description="Whether quotas are enforced"
    )


class MaintenanceCleanupResponse(BaseModel):
    """Result of the periodic cleanup job."""

    expired_sessions_removed: int = Field(
        ..., description="Session records past their expiry that were deleted"
    )
    stale_data_invalidated: bool = Field(
        ..., description="Search, discussion and leaderboard caches purged"
    )


class RateLimitProbeResponse(BaseModel):
    """Rate limit probe result."""

    message: str
    policy: str
    identity: str


class RateLimitPolicyResponse(BaseModel):
    """One registered rate limit policy."""

    name: str = Field(..., description="Policy name (e.g. api-moderate)")
    window_seconds: int = Field(..., description="Window length in seconds")
    max_requests: int = Field(..., description="Requests allowed per window")
