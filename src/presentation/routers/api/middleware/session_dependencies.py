"""Session dependencies for FastAPI routes.

Usage:
    @router.get("/me")
    async def me(session: Annotated[Session, Depends(with_session)]) -> ...:
        ...
"""

import time
from typing import Annotated

from fastapi import Depends, Request, Response

from src.core.container import get_session_store
from src.domain.entities.session import Session
from src.infrastructure.cache.session_store import SessionStore


async def get_optional_session(
    request: Request,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Session | None:
    """Current session from the cookie, or None."""
    return await sessions.get_current_session(request)


async def with_session(
    request: Request,
    response: Response,
    sessions: Annotated[SessionStore, Depends(get_session_store)],
) -> Session:
    """Current session, creating an anonymous one when there is none.

    A new session's cookie is set on the response FastAPI builds from the
    route's return value. When the store is down the new session cannot be
    read back; a transient session with the issued id is returned instead.
    """
    session = await sessions.get_current_session(request)
    if session is not None:
        return session

    session_id = await sessions.create_session(response=response)
    session = await sessions.get_session(session_id)
    if session is None:
        session = Session.new(
            session_id,
            user_id=None,
            ttl_seconds=sessions.ttl_seconds,
            now_ms=int(time.time() * 1000),
        )
    return session
