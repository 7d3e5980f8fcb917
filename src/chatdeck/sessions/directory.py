from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from chatdeck.sessions.schema import (
    DEFAULT_PREVIEW,
    SessionMetadata,
    clip_preview,
    utc_now,
)
from chatdeck.storage import SESSIONS_KEY, KeyValueStore

logger = logging.getLogger(__name__)

_SNAPSHOT = TypeAdapter(list[SessionMetadata])


class SessionDirectory:
    """Persisted list of known sessions with a short preview for each.

    The whole list is rewritten on every change. Anything unreadable in the
    store is treated as an empty directory.
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock

    def list(self) -> list[SessionMetadata]:
        raw = self.store.get_item(SESSIONS_KEY)
        if not raw:
            return []
        try:
            return _SNAPSHOT.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring corrupt session directory: {e}")
            return []

    def get(self, session_id: str) -> SessionMetadata | None:
        for entry in self.list():
            if entry.id == session_id:
                return entry
        return None

    def recent(self) -> list[SessionMetadata]:
        return sorted(self.list(), key=lambda entry: entry.last_touched, reverse=True)

    def touch(self, session_id: str, preview: str | None = None) -> None:
        sessions = self.list()
        existing = next((s for s in sessions if s.id == session_id), None)

        if existing is None:
            sessions.insert(
                0,
                SessionMetadata(
                    id=session_id,
                    preview=clip_preview(preview or DEFAULT_PREVIEW),
                    last_touched=self.clock(),
                ),
            )
            self._save(sessions)
            logger.debug(f"Registered session {session_id}")
            return

        if not preview:
            return
        preview = clip_preview(preview)
        if preview == existing.preview:
            return

        existing.preview = preview
        existing.last_touched = self.clock()
        self._save(sessions)
        logger.debug(f"Updated preview for session {session_id}")

    def _save(self, sessions: list[SessionMetadata]) -> None:
        payload = _SNAPSHOT.dump_python(sessions, mode="json", by_alias=True)
        self.store.set_item(SESSIONS_KEY, json.dumps(payload))
