import logging
from typing import Any, Callable, Protocol

import httpx
from pydantic import ValidationError

from chatdeck.sessions.schema import Message

logger = logging.getLogger(__name__)

MAX_MESSAGE_CHARS = 8000
CHAT_ENDPOINT = "/api/chat"


class BackendError(Exception):
    def __init__(self, reason: str | None = None, status_code: int | None = None):
        super().__init__(reason or "Request failed.")
        self.reason = reason
        self.status_code = status_code


class ChatBackend(Protocol):
    async def history(self, session_id: str) -> list[Message]: ...

    async def exchange(self, session_id: str, message: str) -> str: ...

    async def aclose(self) -> None: ...


def check_message(message: str) -> None:
    if len(message) > MAX_MESSAGE_CHARS:
        raise BackendError(
            f"Message is too long (max {MAX_MESSAGE_CHARS} characters)."
        )


def parse_messages(items: Any) -> list[Message]:
    """Turn a history payload into messages, keeping server order.

    Accepts both the flat ``{role, text}`` shape and the stored
    ``{role, parts: [{text}]}`` shape. Entries that fit neither are skipped.
    """
    if not isinstance(items, list):
        return []

    messages: list[Message] = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-object history entry: {item!r}")
            continue
        text = item.get("text")
        if text is None and isinstance(item.get("parts"), list):
            text = "".join(
                str(part.get("text", ""))
                for part in item["parts"]
                if isinstance(part, dict)
            )
        try:
            messages.append(Message(role=item.get("role"), text=text))
        except ValidationError as e:
            logger.warning(f"Skipping invalid history entry: {e.errors()[0]['msg']}")
    return messages


def _json_body(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class HttpChatBackend:
    def __init__(
        self,
        base_url: str,
        timeout_s: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                headers={"User-Agent": "chatdeck/0.1"},
            )
        return self._client

    async def history(self, session_id: str) -> list[Message]:
        try:
            response = await self.client.get(
                CHAT_ENDPOINT, params={"sessionId": session_id}
            )
        except httpx.HTTPError as e:
            raise BackendError(str(e) or e.__class__.__name__) from e

        data = _json_body(response)
        if not response.is_success:
            raise BackendError(
                data.get("error") or "Failed to load history.",
                status_code=response.status_code,
            )
        messages = parse_messages(data.get("messages"))
        logger.debug(f"Fetched {len(messages)} messages for session {session_id}")
        return messages

    async def exchange(self, session_id: str, message: str) -> str:
        check_message(message)
        try:
            response = await self.client.post(
                CHAT_ENDPOINT, json={"sessionId": session_id, "message": message}
            )
        except httpx.HTTPError as e:
            raise BackendError(str(e) or e.__class__.__name__) from e

        data = _json_body(response)
        if not response.is_success:
            raise BackendError(
                data.get("error") or "Request failed.",
                status_code=response.status_code,
            )
        reply = data.get("reply")
        if not isinstance(reply, str) or not reply:
            raise BackendError("The server returned an empty reply.")
        return reply

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def echo_responder(session_id: str, message: str, history: list[Message]) -> str:
    return f"You said: {message}"


class InMemoryChatBackend:
    """Process-local backend that keeps histories in a dict.

    ``responder`` receives the session id, the new message and the history
    before the exchange.
    """

    def __init__(
        self,
        responder: Callable[[str, str, list[Message]], str] = echo_responder,
    ):
        self.responder = responder
        self.sessions: dict[str, list[Message]] = {}

    async def history(self, session_id: str) -> list[Message]:
        return list(self.sessions.get(session_id, []))

    async def exchange(self, session_id: str, message: str) -> str:
        check_message(message)
        history = self.sessions.setdefault(session_id, [])
        reply = self.responder(session_id, message, list(history))
        history.append(Message(role="user", text=message))
        history.append(Message(role="model", text=reply))
        return reply

    async def aclose(self) -> None:
        return None
