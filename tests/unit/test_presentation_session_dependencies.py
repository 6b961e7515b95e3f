"""Unit tests for session dependencies (with_session, get_optional_session).

A minimal FastAPI app exercises the dependencies through a TestClient.
"""

from typing import Annotated
from unittest.mock import AsyncMock

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from src.core.container import get_session_store
from src.domain.entities.session import Session
from src.infrastructure.cache.session_store import SessionStore
from src.presentation.routers.api.middleware.session_dependencies import (
    get_optional_session,
    with_session,
)

COOKIE = "test_session"


def _app(sessions: SessionStore) -> FastAPI:
    app = FastAPI()

    @app.get("/ensure")
    async def ensure(session: Annotated[Session, Depends(with_session)]) -> dict:
        return {"id": session.id, "user_id": session.user_id}

    @app.get("/optional")
    async def optional(
        session: Annotated[Session | None, Depends(get_optional_session)],
    ) -> dict:
        return {"present": session is not None}

    app.dependency_overrides[get_session_store] = lambda: sessions
    return app


@pytest.fixture
def sessions(memory_store, mock_logger):
    return SessionStore(memory_store, mock_logger, cookie_name=COOKIE, ttl_seconds=60)


@pytest.mark.unit
class TestWithSession:
    """Test get-or-create session dependency."""

    def test_creates_session_and_sets_cookie(self, sessions):
        client = TestClient(_app(sessions))

        response = client.get("/ensure")

        assert response.status_code == 200
        assert client.cookies.get(COOKIE) == response.json()["id"]

    def test_reuses_existing_session(self, sessions):
        client = TestClient(_app(sessions))

        first = client.get("/ensure").json()["id"]
        second = client.get("/ensure").json()["id"]

        assert first == second

    def test_store_down_yields_transient_session(self, mock_logger):
        store = AsyncMock()
        store.get = AsyncMock(return_value=None)
        store.set = AsyncMock(return_value=None)
        down = SessionStore(store, mock_logger, cookie_name=COOKIE, ttl_seconds=60)
        client = TestClient(_app(down))

        response = client.get("/ensure")

        assert response.status_code == 200
        assert len(response.json()["id"]) == 64


@pytest.mark.unit
class TestOptionalSession:
    """Test optional session dependency."""

    def test_absent_without_cookie(self, sessions):
        client = TestClient(_app(sessions))

        assert client.get("/optional").json() == {"present": False}

    def test_present_after_creation(self, sessions):
        client = TestClient(_app(sessions))
        client.get("/ensure")

        assert client.get("/optional").json() == {"present": True}
