from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.pointer import ActiveSessionPointer
from chatdeck.sessions.schema import (
    DEFAULT_PREVIEW,
    PREVIEW_CHARS,
    ConversationState,
    Message,
    SessionMetadata,
)

__all__ = [
    "ActiveSessionPointer",
    "ConversationState",
    "DEFAULT_PREVIEW",
    "Message",
    "PREVIEW_CHARS",
    "SessionDirectory",
    "SessionMetadata",
]
