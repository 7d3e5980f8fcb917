import logging

from common.events import SessionChangedEvent
from chatdeck.conversation import ConversationController

logger = logging.getLogger(__name__)


class SessionCoordinator:
    def __init__(self, controller: ConversationController):
        self.controller = controller
        self.pointer = controller.pointer
        self.directory = controller.directory

    @property
    def current(self) -> str:
        return self.pointer.get()

    async def start(self) -> str:
        session_id = self.pointer.get()
        created = not session_id
        if created:
            session_id = self.pointer.create_new()
        else:
            self.directory.touch(session_id)
        logger.info(f"Starting with session {session_id}")
        self.controller.emitter.emit(SessionChangedEvent(session_id=session_id, created=created))
        await self.controller.load_history(session_id)
        return session_id

    async def new_session(self) -> str:
        session_id = self.pointer.create_new()
        self.controller.reset(session_id)
        self.controller.emitter.emit(SessionChangedEvent(session_id=session_id, created=True))
        await self.controller.load_history(session_id)
        return session_id

    async def switch_to(self, session_id: str) -> bool:
        session_id = session_id.strip()
        if not session_id or session_id == self.pointer.get():
            return False
        if self.directory.get(session_id) is None:
            logger.info(f"Switching to unregistered session {session_id}")
        self.pointer.set(session_id)
        self.controller.clear_error()
        self.controller.emitter.emit(SessionChangedEvent(session_id=session_id))
        await self.controller.load_history(session_id)
        return True
