"""Keyed storage of session record lists."""

import copy
import logging
from typing import Protocol

from ..core import SessionPersistence

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """session id -> ordered list of JSON records."""

    def get(self, session_id: str) -> list[dict] | None: ...

    def put(self, session_id: str, records: list[dict]) -> None: ...

    def ids(self) -> list[str]: ...


class InMemorySessionStore:
    """Process-local store, used by tests and embedders."""

    def __init__(self):
        self._sessions: dict[str, list[dict]] = {}

    def get(self, session_id: str) -> list[dict] | None:
        records = self._sessions.get(session_id)
        return copy.deepcopy(records) if records is not None else None

    def put(self, session_id: str, records: list[dict]) -> None:
        self._sessions[session_id] = copy.deepcopy(records)

    def ids(self) -> list[str]:
        return list(self._sessions)


class FileSessionStore:
    """
    Sessions document read and rewritten whole on every call.
    A missing file is an empty mapping.
    """

    def __init__(self, persistence: SessionPersistence):
        self.persistence = persistence

    def get(self, session_id: str) -> list[dict] | None:
        return self.persistence.load().get(session_id)

    def put(self, session_id: str, records: list[dict]) -> None:
        sessions = self.persistence.load()
        sessions[session_id] = records
        self.persistence.save(sessions)
        logger.debug(f"Stored {len(records)} records for session {session_id}")

    def ids(self) -> list[str]:
        return list(self.persistence.load())
