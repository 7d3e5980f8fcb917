from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PREVIEW_CHARS = 50
DEFAULT_PREVIEW = "New conversation"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def clip_preview(text: str) -> str:
    return text[:PREVIEW_CHARS]


class SessionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    preview: str = Field(default=DEFAULT_PREVIEW, max_length=PREVIEW_CHARS)
    last_touched: datetime = Field(default_factory=utc_now, alias="lastTouched")


class Message(BaseModel):
    role: Literal["user", "model"]
    text: str = Field(min_length=1)


class ConversationState(BaseModel):
    session_id: str
    messages: list[Message] = Field(default_factory=list)
    pending: bool = False
    last_error: str | None = None
