"""Message models for the conversation log and WebSocket communication."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Longest user message the composer accepts
MAX_MESSAGE_LENGTH = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class MessageSender(str, Enum):
    """Message author."""

    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One immutable turn in a conversation.

    User text is capped at ``MAX_MESSAGE_LENGTH`` characters; assistant text
    is not limited.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    text: str
    sender: MessageSender
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _check_user_length(self) -> "Message":
        if self.sender == MessageSender.USER and len(self.text) > MAX_MESSAGE_LENGTH:
            raise ValueError(
                f"user message exceeds {MAX_MESSAGE_LENGTH} characters"
            )
        return self

    @classmethod
    def from_user(cls, text: str) -> "Message":
        return cls(text=text, sender=MessageSender.USER)

    @classmethod
    def from_assistant(cls, text: str) -> "Message":
        return cls(text=text, sender=MessageSender.ASSISTANT)

    @property
    def is_user(self) -> bool:
        return self.sender == MessageSender.USER


class MessageType(str, Enum):
    """WebSocket message type discriminator."""

    TEXT = "text"
    STATUS = "status"
    ERROR = "error"


class IncomingMessage(BaseModel):
    """Message received from client via WebSocket."""

    type: MessageType
    content: Optional[str] = None

    def is_text(self) -> bool:
        return self.type == MessageType.TEXT and self.content is not None


class OutgoingMessage(BaseModel):
    """Message sent to client via WebSocket."""

    type: MessageType
    content: Optional[str] = None
    session_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


class SendMessageRequest(BaseModel):
    """Body of ``POST /api/chat/messages``."""

    text: str
