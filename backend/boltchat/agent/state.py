"""Conversation engine states, events and send results."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from boltchat.completion.errors import ErrorKind
from boltchat.models.messages import Message


class EngineState(str, Enum):
    """Per-session send state. There is no error state: failures are messages."""

    IDLE = "idle"
    SENDING = "sending"


class SendStatus(str, Enum):
    """How a ``send_message`` call resolved."""

    COMPLETED = "completed"
    FAILED = "failed"
    CREDENTIAL_MISSING = "credential_missing"
    BUSY = "busy"
    INVALID = "invalid"


class EventKind(str, Enum):
    STATE_CHANGED = "state_changed"
    MESSAGE_APPENDED = "message_appended"
    SESSION_CHANGED = "session_changed"
    NOTICE = "notice"


class EngineEvent(BaseModel):
    """Something the presentation layer may want to re-render for."""

    kind: EventKind
    session_id: str
    state: Optional[EngineState] = None
    message: Optional[Message] = None
    notice: Optional[str] = None


class SendResult(BaseModel):
    """Outcome of one ``send_message`` call.

    ``messages`` holds what was appended: nothing for ``busy`` and
    ``invalid``, otherwise the user message followed by the assistant reply.
    ``notice`` is set on ``failed`` and carries the same text as the reply.
    ``error_kind`` classifies ``invalid``, ``credential_missing`` and
    ``failed`` results; it is empty when the failure was not a known kind.
    """

    status: SendStatus
    session_id: str
    messages: list[Message] = Field(default_factory=list)
    notice: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def reply(self) -> Message | None:
        return self.messages[-1] if len(self.messages) == 2 else None
