import logging

from common.ids import generate_id
from chatdeck.sessions.directory import SessionDirectory
from chatdeck.storage import CURRENT_SESSION_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class ActiveSessionPointer:
    def __init__(self, store: KeyValueStore, directory: SessionDirectory):
        self.store = store
        self.directory = directory

    def get(self) -> str:
        return (self.store.get_item(CURRENT_SESSION_KEY) or "").strip()

    def set(self, session_id: str) -> None:
        self.store.set_item(CURRENT_SESSION_KEY, session_id)

    def create_new(self) -> str:
        session_id = generate_id()
        self.set(session_id)
        self.directory.touch(session_id)
        logger.info(f"Created new session {session_id}")
        return session_id
