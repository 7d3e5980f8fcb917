import logging

from common.events import EventCallback
from chatdeck.backend import ChatBackend, HttpChatBackend, InMemoryChatBackend
from chatdeck.config import ClientConfig
from chatdeck.conversation import ConversationController
from chatdeck.coordinator import SessionCoordinator
from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.pointer import ActiveSessionPointer
from chatdeck.storage import FileStore, KeyValueStore

logger = logging.getLogger(__name__)


def build_backend(config: ClientConfig) -> ChatBackend:
    if config.offline:
        return InMemoryChatBackend()
    return HttpChatBackend(config.base_url, timeout_s=config.request_timeout_s)


class ChatRuntime:
    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        backend: ChatBackend | None = None,
        on_event: EventCallback = None,
    ):
        self.config = config or ClientConfig()
        self.store = store or FileStore(self.config.state_dir)
        self.backend = backend or build_backend(self.config)

        self.directory = SessionDirectory(self.store)
        self.pointer = ActiveSessionPointer(self.store, self.directory)
        self.controller = ConversationController(
            self.backend,
            self.directory,
            self.pointer,
            welcome_text=self.config.welcome_text,
            fallback_text=self.config.fallback_text,
            on_event=on_event,
        )
        self.coordinator = SessionCoordinator(self.controller)

    async def start(self) -> str:
        return await self.coordinator.start()

    async def process_user_message(self, text: str) -> bool:
        return await self.controller.send(text)

    async def aclose(self) -> None:
        await self.backend.aclose()
        logger.debug("Runtime closed")
