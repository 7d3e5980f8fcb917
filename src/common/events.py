from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, TypeAlias


@dataclass(frozen=True, slots=True)
class StatusChangedEvent:
    session_id: str
    status: str


@dataclass(frozen=True, slots=True)
class SessionChangedEvent:
    session_id: str
    created: bool = False


@dataclass(frozen=True, slots=True)
class HistoryLoadedEvent:
    session_id: str
    message_count: int
    degraded: bool = False


@dataclass(frozen=True, slots=True)
class MessageAppendedEvent:
    session_id: str
    role: str
    text: str


@dataclass(frozen=True, slots=True)
class StaleResultEvent:
    session_id: str
    kind: str


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    message: str
    source: str | None = None


Event: TypeAlias = (
    StatusChangedEvent
    | SessionChangedEvent
    | HistoryLoadedEvent
    | MessageAppendedEvent
    | StaleResultEvent
    | ErrorEvent
)
EventCallback: TypeAlias = Callable[[Event], None] | None


class EventEmitter:
    def __init__(self, callback: EventCallback = None):
        self._callback = callback

    def emit(self, event: Event) -> None:
        if self._callback is not None:
            self._callback(event)
