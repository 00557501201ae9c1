from __future__ import annotations

import logging
from threading import Lock

from timetabler.core.exceptions import ConfigurationError, ResourceNotFoundError
from timetabler.services.session import SchedulingSession

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory registry of scheduling sessions.

    The lock only guards the mapping; callers serialise edits to one session.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, SchedulingSession] = {}
        self._lock = Lock()

    def add(self, session: SchedulingSession, max_sessions: int) -> SchedulingSession:
        with self._lock:
            if len(self._sessions) >= max_sessions:
                raise ConfigurationError(f"Session limit of {max_sessions} reached; delete an existing session first")
            self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> SchedulingSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError("SchedulingSession", session_id)
        return session

    def remove(self, session_id: str) -> None:
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise ResourceNotFoundError("SchedulingSession", session_id)
        logger.info("Deleted scheduling session %s", session_id)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


_store = SessionStore()


def get_session_store() -> SessionStore:
    return _store


def get_scheduling_session(session_id: str) -> SchedulingSession:
    return _store.get(session_id)


def clear_session_store() -> None:
    _store.clear()
