import logging
import re
from pathlib import Path
from typing import Protocol

from common.jsonio import atomic_write_text, read_text

logger = logging.getLogger(__name__)

SESSIONS_KEY = "chat_sessions"
CURRENT_SESSION_KEY = "chat_session_id"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...


def _safe_key(key: str) -> str:
    return re.sub(r"[^\w.\-]+", "_", key.strip()).lstrip(".") or "_"


class FileStore:
    """Persisted string blobs, one file per key under ``state_dir``.

    Reads never raise: a missing or unreadable file is reported as ``None``
    so callers can treat it as absent state.
    """

    def __init__(self, state_dir: str | Path):
        self.state_dir = Path(state_dir)

    def _path(self, key: str) -> Path:
        return self.state_dir / _safe_key(key)

    def get_item(self, key: str) -> str | None:
        return read_text(self._path(key))

    def set_item(self, key: str, value: str) -> None:
        atomic_write_text(self._path(key), value)
        logger.debug(f"Persisted {key} ({len(value)} bytes)")


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
