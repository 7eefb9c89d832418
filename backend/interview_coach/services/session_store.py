"""
Session Store
Persists session snapshots so an interview survives reloads and restarts.

Both stores share the same read/write contract: a session goes in as a
snapshot and comes back out as a fresh object, never as a shared reference.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from interview_coach.core.models import InterviewSession, SessionStatus

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract base class for session persistence."""

    @abstractmethod
    def save_session(self, session: InterviewSession) -> None:
        """Insert or overwrite the snapshot for session.session_id."""
        pass

    @abstractmethod
    def load_session(self, session_id: str) -> Optional[InterviewSession]:
        pass

    @abstractmethod
    def list_sessions(self, status: Optional[SessionStatus] = None) -> List[InterviewSession]:
        """Sessions in the order they were first saved, optionally filtered by status."""
        pass


class InMemorySessionStore(SessionStore):
    """Process-local store. Contents are lost on restart."""

    def __init__(self):
        self._snapshots: Dict[str, str] = {}
        self._lock = threading.Lock()

    def save_session(self, session: InterviewSession) -> None:
        with self._lock:
            self._snapshots[session.session_id] = session.snapshot()

    def load_session(self, session_id: str) -> Optional[InterviewSession]:
        with self._lock:
            data = self._snapshots.get(session_id)
        return InterviewSession.from_snapshot(data) if data is not None else None

    def list_sessions(self, status: Optional[SessionStatus] = None) -> List[InterviewSession]:
        with self._lock:
            snapshots = list(self._snapshots.values())
        sessions = [InterviewSession.from_snapshot(data) for data in snapshots]
        if status is not None:
            sessions = [s for s in sessions if s.status == status]
        return sessions


class JsonFileSessionStore(SessionStore):
    """
    One JSON snapshot per session under a directory.

    Writes go to a temporary file first and are moved into place, so a crash
    mid-write leaves the previous snapshot intact.
    """

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        logger.info(f"Session snapshots stored in {self.directory.resolve()}")

    def _path(self, session_id: str) -> Path:
        if not session_id or os.sep in session_id or session_id.startswith("."):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self.directory / f"{session_id}{self.SUFFIX}"

    def save_session(self, session: InterviewSession) -> None:
        path = self._path(session.session_id)
        tmp_path = path.with_suffix(".tmp")
        with self._lock:
            tmp_path.write_text(session.snapshot(), encoding="utf-8")
            os.replace(tmp_path, path)

    def load_session(self, session_id: str) -> Optional[InterviewSession]:
        path = self._path(session_id)
        if not path.exists():
            return None
        return InterviewSession.from_snapshot(path.read_text(encoding="utf-8"))

    def list_sessions(self, status: Optional[SessionStatus] = None) -> List[InterviewSession]:
        sessions = []
        for path in self.directory.glob(f"*{self.SUFFIX}"):
            try:
                sessions.append(InterviewSession.from_snapshot(path.read_text(encoding="utf-8")))
            except ValueError as e:
                logger.error(f"Skipping unreadable snapshot {path.name}: {e}")
        sessions.sort(key=lambda s: s.created_at)
        if status is not None:
            sessions = [s for s in sessions if s.status == status]
        return sessions


def create_session_store(directory: Optional[str] = None) -> SessionStore:
    """Pick the file store when a directory is configured, else the in-memory one."""
    if directory:
        return JsonFileSessionStore(directory)
    logger.info("No session store directory configured, using in-memory storage")
    return InMemorySessionStore()
