"""Sessions resource router.

Server-side sessions carried by an HttpOnly cookie. Lifecycle endpoints are
guarded by the ``auth`` rate limit policy, data endpoints by ``api-moderate``.
The data view is cached per session; every write to it (data update, logout,
regeneration) drops that entry before responding.

Endpoints:
    POST   /api/v1/sessions                      - Create session (sets cookie)
    GET    /api/v1/sessions/current              - Current session
    DELETE /api/v1/sessions/current              - Destroy session (logout)
    POST   /api/v1/sessions/current/regeneration - Rotate session id
    GET    /api/v1/sessions/current/data         - Session data (cached)
    PUT    /api/v1/sessions/current/data/{key}   - Set one data field
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, Response

from src.core.container import get_response_cache, get_session_store
from src.domain.entities.session import Session
from src.infrastructure.cache.cache_keys import CacheKeys, CacheTTL
from src.infrastructure.cache.session_store import SessionStore
from src.presentation.routers.api.middleware.request_guard import guarded
from src.presentation.routers.api.middleware.session_dependencies import (
    with_session,
)
from src.schemas.session_schemas import (
    SessionCreateRequest,
    SessionDataResponse,
    SessionDataUpdateRequest,
    SessionResponse,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])

SESSION_POLICY = "auth"
DATA_POLICY = "api-moderate"


def _no_session() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "No active session"},
    )


def _store_unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Session store unavailable"},
    )


def session_data_cache_key(request: Request) -> str:
    """Cache key for the data view of the session named by the cookie."""
    session_id = request.cookies.get(get_session_store().cookie_name, "")
    return CacheKeys.session_data(session_id)


async def invalidate_session_data(request: Request) -> None:
    await get_response_cache().delete(session_data_cache_key(request))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionResponse,
    summary="Create session",
)
@guarded(SESSION_POLICY)
async def create_session(
    request: Request,
    payload: SessionCreateRequest,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    """Create a session and set the session cookie."""
    session_id = await sessions.create_session(
        user_id=payload.user_id, data=payload.data
    )
    session = await sessions.get_session(session_id)
    if session is None:
        return _store_unavailable()

    response = JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=SessionResponse.from_entity(session).model_dump(mode="json"),
    )
    sessions.set_cookie(response, session_id)
    return response


@router.get(
    "/current",
    response_model=SessionResponse,
    summary="Get current session",
)
@guarded(SESSION_POLICY)
async def get_current_session(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    session = await sessions.get_current_session(request)
    if session is None:
        return _no_session()
    return JSONResponse(
        content=SessionResponse.from_entity(session).model_dump(mode="json")
    )


@router.delete(
    "/current",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Destroy current session (logout)",
)
@guarded(SESSION_POLICY, invalidate=invalidate_session_data)
async def delete_current_session(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    """Idempotent: always clears the cookie."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    session_id = request.cookies.get(sessions.cookie_name)
    if session_id:
        await sessions.destroy_session(session_id, response=response)
    else:
        sessions.clear_cookie(response)
    return response


@router.post(
    "/current/regeneration",
    status_code=status.HTTP_201_CREATED,
    response_model=SessionResponse,
    summary="Regenerate session id",
)
@guarded(SESSION_POLICY, invalidate=invalidate_session_data)
async def regenerate_current_session(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    """Move the current session to a fresh id (after a privilege change)."""
    old_session_id = request.cookies.get(sessions.cookie_name)
    if not old_session_id:
        return _no_session()

    new_session_id = await sessions.regenerate_session(old_session_id)
    session = await sessions.get_session(new_session_id) if new_session_id else None
    if session is None:
        return _no_session()

    response = JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=SessionResponse.from_entity(session).model_dump(mode="json"),
    )
    sessions.set_cookie(response, session.id)
    return response


@router.get(
    "/current/data",
    response_model=SessionDataResponse,
    summary="Get current session data",
)
@guarded(DATA_POLICY, cache_ttl=CacheTTL.SHORT, cache_key=session_data_cache_key)
async def get_current_session_data(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    session = await sessions.get_current_session(request)
    if session is None:
        return _no_session()
    return JSONResponse(
        content=SessionDataResponse(data=session.data).model_dump(mode="json")
    )


@router.put(
    "/current/data/{key}",
    response_model=SessionResponse,
    summary="Set one session data field",
)
@guarded(DATA_POLICY, invalidate=invalidate_session_data)
async def put_current_session_data(
    request: Request,
    key: str,
    payload: SessionDataUpdateRequest,
    session: Annotated[Session, Depends(with_session)],
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Response:
    """Set a data field, starting an anonymous session when there is none."""
    stored = await sessions.set_session_data(session.id, key, payload.value)
    updated = await sessions.get_session(session.id) if stored else None
    if updated is None:
        return _store_unavailable()

    response = JSONResponse(
        content=SessionResponse.from_entity(updated).model_dump(mode="json")
    )
    sessions.set_cookie(response, updated.id)
    return response
