"""Session request/response schemas.

Pydantic models for the session API. Kept separate from the Session domain
entity - these are HTTP-layer concerns.

RESTful Endpoints:
    POST   /api/v1/sessions                       - Create session
    GET    /api/v1/sessions/current               - Current session
    DELETE /api/v1/sessions/current               - Destroy current session
    POST   /api/v1/sessions/current/regeneration  - Rotate session id
    GET    /api/v1/sessions/current/data          - Session data (cached)
    PUT    /api/v1/sessions/current/data/{key}    - Set one data field
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.domain.entities.session import Session


def _from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=UTC)


class SessionCreateRequest(BaseModel):
    """Request schema for creating a session."""

    user_id: str | None = Field(
        default=None,
        description="Owning user; omit for an anonymous session",
    )
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Initial session data",
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"user_id": "42", "data": {"theme": "dark"}}}
    )


class SessionResponse(BaseModel):
    """Response schema for a session.

    The session id itself is never echoed; it travels only in the cookie.
    """

    user_id: str | None = Field(None, description="Owning user")
    data: dict[str, Any] = Field(default_factory=dict, description="Session data")
    created_at: datetime = Field(..., description="When the session was created")
    updated_at: datetime = Field(..., description="Last write")
    expires_at: datetime = Field(..., description="When the session expires")

    @classmethod
    def from_entity(cls, session: Session) -> "SessionResponse":
        return cls(
            user_id=session.user_id,
            data=session.data,
            created_at=_from_epoch_ms(session.created_at),
            updated_at=_from_epoch_ms(session.updated_at),
            expires_at=_from_epoch_ms(session.expires_at),
        )


class SessionDataUpdateRequest(BaseModel):
    """Request schema for setting one session data field."""

    value: Any = Field(..., description="JSON value stored under the key")

    model_config = ConfigDict(json_schema_extra={"example": {"value": "dark"}})


class SessionDataResponse(BaseModel):
    """Data held by the current session."""

    data: dict[str, Any] = Field(default_factory=dict, description="Session data")
