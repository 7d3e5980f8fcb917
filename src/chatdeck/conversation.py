from __future__ import annotations

import logging
from enum import Enum

from common.events import (
    ErrorEvent,
    EventCallback,
    EventEmitter,
    HistoryLoadedEvent,
    MessageAppendedEvent,
    StaleResultEvent,
    StatusChangedEvent,
)
from chatdeck.backend import BackendError, ChatBackend
from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.pointer import ActiveSessionPointer
from chatdeck.sessions.schema import ConversationState, Message, clip_preview

logger = logging.getLogger(__name__)

WELCOME_TEXT = "Hi! I'm your assistant. Ask me anything."
FALLBACK_TEXT = "I ran into an issue sending that. Please try again."
GENERIC_ERROR = "Something went wrong."


class ConversationStatus(str, Enum):
    IDLE = "idle"
    LOADING_HISTORY = "loading_history"
    READY = "ready"
    SENDING = "sending"
    ERROR = "error"


class ConversationController:
    """Holds the displayed conversation and runs the optimistic send protocol.

    Backend calls are never cancelled. Instead, every result is checked
    against the active session pointer when it arrives and dropped if the
    user has moved to another session in the meantime.
    """

    def __init__(
        self,
        backend: ChatBackend,
        directory: SessionDirectory,
        pointer: ActiveSessionPointer,
        *,
        welcome_text: str = WELCOME_TEXT,
        fallback_text: str = FALLBACK_TEXT,
        on_event: EventCallback = None,
    ):
        self.backend = backend
        self.directory = directory
        self.pointer = pointer
        self.welcome_text = welcome_text
        self.fallback_text = fallback_text
        self.emitter = EventEmitter(on_event)

        self.state: ConversationState | None = None
        self.status = ConversationStatus.IDLE
        self.draft = ""
        self._in_flight: str | None = None

    @property
    def session_id(self) -> str:
        return self.state.session_id if self.state else ""

    @property
    def messages(self) -> list[Message]:
        return list(self.state.messages) if self.state else []

    @property
    def last_error(self) -> str | None:
        return self.state.last_error if self.state else None

    @property
    def is_sending(self) -> bool:
        return self._in_flight is not None

    def _is_current(self, session_id: str) -> bool:
        return bool(session_id) and self.pointer.get() == session_id

    def _set_status(self, status: ConversationStatus) -> None:
        self.status = status
        self.emitter.emit(StatusChangedEvent(session_id=self.session_id, status=status.value))

    def _append(self, message: Message) -> None:
        self.state.messages.append(message)
        self.emitter.emit(
            MessageAppendedEvent(
                session_id=self.state.session_id, role=message.role, text=message.text
            )
        )

    def _refresh_preview(self, session_id: str, text: str) -> None:
        # The preview is cosmetic; a failed write must not stall the conversation.
        try:
            self.directory.touch(session_id, clip_preview(text))
        except OSError as e:
            logger.warning(f"Could not update preview for session {session_id}: {e}")

    def _welcome(self) -> list[Message]:
        return [Message(role="model", text=self.welcome_text)]

    def reset(self, session_id: str) -> None:
        self.state = ConversationState(session_id=session_id)
        self._set_status(ConversationStatus.READY)

    def clear_error(self) -> None:
        if self.state is not None:
            self.state.last_error = None

    async def load_history(self, session_id: str) -> bool:
        """Replace the displayed conversation with ``session_id``'s history.

        Returns False when the result arrived after another session became
        active and was therefore discarded.
        """
        if not session_id:
            return False

        keep = self.state.messages if self.state and self.state.session_id == session_id else []
        state = ConversationState(session_id=session_id, messages=list(keep))
        self.state = state
        self._set_status(ConversationStatus.LOADING_HISTORY)

        degraded = False
        try:
            messages = await self.backend.history(session_id)
        except BackendError as e:
            logger.warning(f"Failed to load history for session {session_id}: {e}")
            messages = []
            degraded = True

        if not self._is_current(session_id) or self.state is not state:
            logger.info(f"Discarding stale history for session {session_id}")
            self.emitter.emit(StaleResultEvent(session_id=session_id, kind="history"))
            return False

        # Replies that landed while this load was out, unless the server has them.
        carried = state.messages[len(keep):]
        if carried and messages[-len(carried):] == carried:
            carried = []

        if messages:
            self.state.messages = list(messages) + carried
            first_user = next((m for m in messages if m.role == "user"), None)
            if first_user is not None:
                self._refresh_preview(session_id, first_user.text)
        else:
            self.state.messages = self._welcome() + carried

        self.emitter.emit(
            HistoryLoadedEvent(
                session_id=session_id,
                message_count=len(self.state.messages),
                degraded=degraded,
            )
        )
        self._set_status(ConversationStatus.READY)
        return True

    async def send(self, text: str | None = None) -> bool:
        """Send ``text`` (or the current draft) to the active session.

        Returns True when a request was issued. The user message is appended
        before the backend answers. A failed request appends a fallback
        reply so the user message is never left unanswered.
        """
        self.clear_error()

        trimmed = (self.draft if text is None else text).strip()
        if not trimmed or self.is_sending or self.state is None:
            return False
        if self.status is ConversationStatus.LOADING_HISTORY:
            return False

        state = self.state
        session_id = state.session_id
        if not self._is_current(session_id):
            return False

        first_exchange = len(state.messages) <= 1
        self._append(Message(role="user", text=trimmed))
        self.draft = ""
        if first_exchange:
            self._refresh_preview(session_id, trimmed)

        self._in_flight = session_id
        state.pending = True
        self._set_status(ConversationStatus.SENDING)

        reply: str | None = None
        error: str | None = None
        try:
            reply = await self.backend.exchange(session_id, trimmed)
        except BackendError as e:
            error = e.reason or GENERIC_ERROR
            logger.warning(f"Send failed for session {session_id}: {error}")
        finally:
            self._in_flight = None
            state.pending = False

        if not self._is_current(session_id) or self.state.session_id != session_id:
            logger.info(f"Dropping late reply for session {session_id}")
            self.emitter.emit(StaleResultEvent(session_id=session_id, kind="reply"))
            return True

        user_message = Message(role="user", text=trimmed)
        answer = Message(role="model", text=reply if error is None else self.fallback_text)
        if self.state is not state:
            # The session was reloaded while the request was out.
            if self.state.messages[-2:] == [user_message, answer]:
                return True
            if not self.state.messages or self.state.messages[-1] != user_message:
                self._append(user_message)
        reloading = self.status is ConversationStatus.LOADING_HISTORY

        if error is None:
            self._append(answer)
            if not reloading:
                self._set_status(ConversationStatus.READY)
            return True

        self.state.last_error = error
        if not reloading:
            self._set_status(ConversationStatus.ERROR)
        self.emitter.emit(ErrorEvent(message=error, source="send"))
        self._append(answer)
        if not reloading:
            self._set_status(ConversationStatus.READY)
        return True
