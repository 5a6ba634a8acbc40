"""In-memory session store. Keyed by the sid cookie value; no expiry, no persistence."""

import logging
import secrets
from typing import Protocol

from models.session import Session

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 24


class SessionStore(Protocol):
    def create(self, access_token: str) -> str: ...

    def get(self, session_id: str | None) -> Session | None: ...

    def delete(self, session_id: str | None) -> None: ...


class InMemorySessionStore:
    """
    Process-local sid -> Session map.

    Each operation is a single dict access on the event loop thread, so
    concurrent requests for different sids never interleave mid-update.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def create(self, access_token: str) -> str:
        session_id = secrets.token_urlsafe(SESSION_ID_BYTES)
        self._sessions[session_id] = Session(session_id=session_id, access_token=access_token)
        logger.info("[store] Session created (active=%d)", len(self._sessions))
        return session_id

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def delete(self, session_id: str | None) -> None:
        if session_id and self._sessions.pop(session_id, None) is not None:
            logger.info("[store] Session deleted (active=%d)", len(self._sessions))

    def clear(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions
