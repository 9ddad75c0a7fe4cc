"""Session models for conversation management."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from boltchat.models.messages import Message
from boltchat.utils.time_format import format_age
from boltchat.utils.topic_detector import detect_topic

DEFAULT_TITLE = "New conversation"
TITLE_MAX_CHARS = 40
PREVIEW_MAX_CHARS = 120


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _truncate(text: str, limit: int) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


class Session(BaseModel):
    """A single conversation: an append-only log of messages.

    A session always holds at least one message; new sessions are seeded
    with the assistant's welcome message via :meth:`start`.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(min_length=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def start(cls, welcome_text: str) -> Session:
        welcome = Message.from_assistant(welcome_text)
        return cls(
            messages=[welcome],
            created_at=welcome.created_at,
            updated_at=welcome.created_at,
        )

    @property
    def last_message(self) -> Message:
        return self.messages[-1]

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def append(self, message: Message) -> None:
        """Append a message and advance ``updated_at`` (never backwards)."""
        self.messages.append(message)
        self.updated_at = max(self.updated_at, message.created_at, _utcnow())
        if self.title == DEFAULT_TITLE and message.is_user:
            self.title = _truncate(message.text, TITLE_MAX_CHARS)

    def user_texts(self) -> list[str]:
        return [m.text for m in self.messages if m.is_user]


class SessionSummary(BaseModel):
    """Read-only projection of a session for list views."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    last_message_text: str
    timestamp: datetime
    message_count: int
    tag_label: Optional[str] = None

    @classmethod
    def from_session(cls, session: Session) -> SessionSummary:
        return cls(
            id=session.id,
            title=session.title,
            last_message_text=_truncate(session.last_message.text, PREVIEW_MAX_CHARS),
            timestamp=session.updated_at,
            message_count=session.message_count,
            tag_label=detect_topic(session.user_texts()),
        )


class SessionListItem(SessionSummary):
    """Summary plus a human-readable age, as rendered by the history list."""

    age_label: str

    @classmethod
    def from_summary(
        cls, summary: SessionSummary, now: datetime | None = None
    ) -> SessionListItem:
        return cls(
            **summary.model_dump(),
            age_label=format_age(summary.timestamp, now=now),
        )


class SessionListResponse(BaseModel):
    """Response for listing sessions."""

    sessions: list[SessionListItem]
    total: int
