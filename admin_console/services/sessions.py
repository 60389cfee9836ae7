"""In-memory registry of open role editor sessions."""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import RLock
from typing import Optional
from uuid import UUID

from admin_console.services.role_editor import RoleEditor, RoleEditorError

logger = logging.getLogger("admin_console.services.sessions")


class SessionNotFound(RoleEditorError):
    """Raised when a session id is unknown or already closed."""


class EditorSessionRegistry:
    """Thread-safe registry; each session owns its editor and cancellation token."""

    def __init__(self, max_sessions: int = 500) -> None:
        self._max_sessions = max(max_sessions, 1)
        self._sessions: "OrderedDict[UUID, RoleEditor]" = OrderedDict()
        self._lock = RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def add(self, editor: RoleEditor) -> RoleEditor:
        with self._lock:
            while len(self._sessions) >= self._max_sessions:
                session_id, evicted = self._sessions.popitem(last=False)
                evicted.close()
                logger.info("editor_session_evicted", extra={"session_id": str(session_id)})
            self._sessions[editor.session_id] = editor
        return editor

    def get(self, session_id: UUID) -> RoleEditor:
        with self._lock:
            editor = self._sessions.get(session_id)
        if editor is None:
            raise SessionNotFound(f"Editor session {session_id} not found")
        return editor

    def discard(self, session_id: UUID) -> Optional[RoleEditor]:
        """Close and forget a session; pending loads for it are dropped."""

        with self._lock:
            editor = self._sessions.pop(session_id, None)
        if editor is not None:
            editor.close()
            logger.info("editor_session_closed", extra={"session_id": str(session_id)})
        return editor

    def clear(self) -> None:
        with self._lock:
            editors = list(self._sessions.values())
            self._sessions.clear()
        for editor in editors:
            editor.close()
