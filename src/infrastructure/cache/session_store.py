"""Server-side session store on the key-value store.

The store holds the canonical session; the client only carries the opaque
id in an HttpOnly cookie.

Key Patterns:
    - session:{session_id} -> JSON session record (camelCase fields)

Lifecycle:
    - create: random 256-bit id, TTL = session lifetime, cookie set
    - read: records past ``expiresAt`` are deleted and read as missing, even
      if the store has not evicted them yet
    - write: ``updatedAt`` and ``expiresAt`` slide forward, TTL re-applied
    - regenerate: data copied to a fresh id, old id deleted (session fixation)

Note:
    Enumeration (per-user listing, cleanup) scans ``session:*``, which is
    O(total sessions). A per-user index set would be needed at larger scale.
"""

import secrets
import time
from collections.abc import Mapping
from typing import Any

from starlette.requests import Request
from starlette.responses import Response

from src.domain.entities.session import Session
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.cache.cache_keys import CacheKeys
from src.infrastructure.cache.key_value_store import KeyValueStore

# Fields a partial update may change; identity and timestamps are owned here
UPDATABLE_FIELDS = frozenset({"user_id", "data"})


def _now_ms() -> int:
    return int(time.time() * 1000)


def _short(session_id: str) -> str:
    """Log-safe session id prefix."""
    return f"{session_id[:8]}..."


class SessionStore:
    """Server-side sessions with cookie-carried ids.

    Attributes:
        cookie_name: Session cookie name (e.g. "neuroquest_session").
        ttl_seconds: Session lifetime and cookie Max-Age.
        secure_cookie: Whether the cookie carries the Secure flag.
    """

    def __init__(
        self,
        store: KeyValueStore,
        logger: LoggerProtocol,
        *,
        cookie_name: str,
        ttl_seconds: int,
        secure_cookie: bool = False,
    ) -> None:
        """Initialize session store.

        Args:
            store: Fail-soft key-value store.
            logger: Structured logger.
            cookie_name: Cookie carrying the session id.
            ttl_seconds: Session lifetime in seconds.
            secure_cookie: Set the Secure cookie flag (production only).
        """
        self._store = store
        self._logger = logger
        self.cookie_name = cookie_name
        self.ttl_seconds = ttl_seconds
        self.secure_cookie = secure_cookie

    # ------------------------------------------------------------------
    # Cookie helpers
    # ------------------------------------------------------------------

    def set_cookie(self, response: Response, session_id: str) -> None:
        response.set_cookie(
            key=self.cookie_name,
            value=session_id,
            max_age=self.ttl_seconds,
            path="/",
            secure=self.secure_cookie,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            secure=self.secure_cookie,
            httponly=True,
            samesite="lax",
        )

    async def _save(self, session: Session) -> None:
        await self._store.set(
            CacheKeys.session(session.id), session.to_dict(), self.ttl_seconds
        )

    def _parse(self, raw: Any) -> Session | None:
        if not isinstance(raw, dict):
            return None
        try:
            return Session.from_dict(raw)
        except (KeyError, TypeError, ValueError) as e:
            self._logger.warning(
                "Failed to deserialize stored session",
                error_message=str(e),
            )
            return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_session(
        self,
        user_id: str | None = None,
        data: Mapping[str, Any] | None = None,
        response: Response | None = None,
    ) -> str:
        """Create and persist a new session.

        Args:
            user_id: Owning user, None for an anonymous session.
            data: Initial session data.
            response: When given, the session cookie is set on it.

        Returns:
            str: New session id (64 hex chars).
        """
        session = Session.new(
            secrets.token_hex(32),
            user_id=user_id,
            ttl_seconds=self.ttl_seconds,
            now_ms=_now_ms(),
            data=dict(data or {}),
        )
        await self._save(session)
        if response is not None:
            self.set_cookie(response, session.id)

        self._logger.info(
            "Session created",
            session_id=_short(session.id),
            user_id=user_id,
        )
        return session.id

    async def get_current_session(self, request: Request) -> Session | None:
        """Session named by the request's cookie, None if absent or expired."""
        session_id = request.cookies.get(self.cookie_name)
        if not session_id:
            return None
        return await self.get_session(session_id)

    async def get_session(self, session_id: str) -> Session | None:
        """Load a session by id.

        Expired records are deleted on detection and read as missing.

        Returns:
            Session, or None if missing, expired, corrupt or store failed.
        """
        session = self._parse(await self._store.get(CacheKeys.session(session_id)))
        if session is None:
            return None

        if session.is_expired(now_ms=_now_ms()):
            await self._store.delete(CacheKeys.session(session_id))
            self._logger.info("Expired session removed", session_id=_short(session_id))
            return None

        return session

    async def update_session(
        self,
        session_id: str,
        updates: Mapping[str, Any],
    ) -> bool:
        """Apply a partial update.

        Only ``user_id`` and ``data`` can change; other fields in ``updates``
        are ignored. ``data`` replaces the stored mapping wholesale.

        Returns:
            bool: False if the session does not exist.
        """
        session = await self.get_session(session_id)
        if session is None:
            return False

        ignored = set(updates) - UPDATABLE_FIELDS
        if ignored:
            self._logger.debug(
                "Ignoring read-only session fields", fields=sorted(ignored)
            )
        if "user_id" in updates:
            session.user_id = updates["user_id"]
        if "data" in updates:
            session.data = dict(updates["data"] or {})

        session.touch(ttl_seconds=self.ttl_seconds, now_ms=_now_ms())
        await self._save(session)
        return True

    async def set_session_data(self, session_id: str, key: str, value: Any) -> bool:
        """Set one data field. Returns False if the session does not exist."""
        session = await self.get_session(session_id)
        if session is None:
            return False
        session.data[key] = value
        session.touch(ttl_seconds=self.ttl_seconds, now_ms=_now_ms())
        await self._save(session)
        return True

    async def get_session_data(self, session_id: str, key: str) -> Any:
        """One data field, None if the session or the field is missing."""
        session = await self.get_session(session_id)
        if session is None:
            return None
        return session.data.get(key)

    async def destroy_session(
        self,
        session_id: str,
        response: Response | None = None,
    ) -> None:
        """Delete the session record and, when given a response, its cookie."""
        await self._store.delete(CacheKeys.session(session_id))
        if response is not None:
            self.clear_cookie(response)
        self._logger.info("Session destroyed", session_id=_short(session_id))

    async def regenerate_session(
        self,
        old_session_id: str,
        response: Response | None = None,
    ) -> str | None:
        """Move a session's data to a fresh id and delete the old id.

        Call after any privilege change (login, role change).

        Returns:
            New session id, or None if the old session does not exist.
        """
        session = await self.get_session(old_session_id)
        if session is None:
            return None

        new_session_id = await self.create_session(
            user_id=session.user_id, data=session.data, response=response
        )
        await self._store.delete(CacheKeys.session(old_session_id))
        self._logger.info(
            "Session regenerated",
            old_session_id=_short(old_session_id),
            session_id=_short(new_session_id),
        )
        return new_session_id

    # ------------------------------------------------------------------
    # Enumeration (full scan)
    # ------------------------------------------------------------------

    async def _load_all(self) -> list[tuple[str, Session]]:
        keys = await self._store.keys(CacheKeys.ALL_SESSIONS)
        if not keys:
            return []
        loaded: list[tuple[str, Session]] = []
        for key, raw in zip(keys, await self._store.mget(keys), strict=False):
            session = self._parse(raw)
            if session is not None:
                loaded.append((key, session))
        return loaded

    async def get_user_sessions(self, user_id: str) -> list[Session]:
        """Live sessions owned by a user (full scan)."""
        now_ms = _now_ms()
        return [
            session
            for _, session in await self._load_all()
            if session.user_id == user_id and not session.is_expired(now_ms=now_ms)
        ]

    async def destroy_user_sessions(self, user_id: str) -> int:
        """Delete every session of a user (e.g. password change).

        Returns:
            int: Number of sessions deleted.
        """
        sessions = await self.get_user_sessions(user_id)
        if not sessions:
            return 0
        deleted = await self._store.delete(
            *(CacheKeys.session(session.id) for session in sessions)
        )
        self._logger.info(
            "User sessions destroyed", user_id=user_id, deleted_count=deleted
        )
        return deleted

    async def cleanup_expired_sessions(self) -> int:
        """Delete records past ``expiresAt`` that the store has not evicted.

        Returns:
            int: Number of sessions deleted.
        """
        now_ms = _now_ms()
        expired_keys = [
            key
            for key, session in await self._load_all()
            if session.is_expired(now_ms=now_ms)
        ]
        cleaned = await self._store.delete(*expired_keys) if expired_keys else 0
        self._logger.info("Expired sessions cleaned up", cleaned_count=cleaned)
        return cleaned
