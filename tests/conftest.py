import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from chatdeck.backend import BackendError
from chatdeck.conversation import ConversationController
from chatdeck.coordinator import SessionCoordinator
from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.pointer import ActiveSessionPointer
from chatdeck.sessions.schema import Message
from chatdeck.storage import MemoryStore


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 60) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ScriptedBackend:
    """Backend double whose calls can be held open until released."""

    def __init__(self):
        self.histories: dict[str, list[Message]] = {}
        self.history_error: BackendError | None = None
        self.replies: list[str | BackendError] = []
        self.history_calls: list[str] = []
        self.exchanges: list[tuple[str, str]] = []
        self.history_gates: dict[str, asyncio.Event] = {}
        self.exchange_gate: asyncio.Event | None = None
        self.exchange_started = asyncio.Event()
        self.history_started = asyncio.Event()

    def hold_history(self, session_id: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.history_gates[session_id] = gate
        return gate

    def hold_exchange(self) -> asyncio.Event:
        self.exchange_gate = asyncio.Event()
        return self.exchange_gate

    async def history(self, session_id: str) -> list[Message]:
        self.history_calls.append(session_id)
        self.history_started.set()
        gate = self.history_gates.get(session_id) or self.history_gates.get("*")
        if gate is not None:
            await gate.wait()
        if self.history_error is not None:
            raise self.history_error
        return list(self.histories.get(session_id, []))

    async def exchange(self, session_id: str, message: str) -> str:
        self.exchanges.append((session_id, message))
        self.exchange_started.set()
        if self.exchange_gate is not None:
            await self.exchange_gate.wait()
        reply = self.replies.pop(0) if self.replies else f"reply to {message}"
        if isinstance(reply, BackendError):
            raise reply
        return reply

    async def aclose(self) -> None:
        return None


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def directory(store, clock):
    return SessionDirectory(store, clock=clock)


@pytest.fixture
def pointer(store, directory):
    return ActiveSessionPointer(store, directory)


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def events():
    return []


@pytest.fixture
def controller(backend, directory, pointer, events):
    return ConversationController(backend, directory, pointer, on_event=events.append)


@pytest.fixture
def coordinator(controller):
    return SessionCoordinator(controller)
