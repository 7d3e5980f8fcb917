"""Client-side session and conversation-state manager for a remote chat assistant."""

from chatdeck.backend import BackendError, HttpChatBackend, InMemoryChatBackend
from chatdeck.conversation import ConversationController, ConversationStatus
from chatdeck.coordinator import SessionCoordinator
from chatdeck.sessions import ActiveSessionPointer, Message, SessionDirectory, SessionMetadata

__version__ = "0.1.0"

__all__ = [
    "ActiveSessionPointer",
    "BackendError",
    "ConversationController",
    "ConversationStatus",
    "HttpChatBackend",
    "InMemoryChatBackend",
    "Message",
    "SessionCoordinator",
    "SessionDirectory",
    "SessionMetadata",
]
