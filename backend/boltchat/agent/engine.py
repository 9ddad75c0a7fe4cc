"""Conversation engine: owns the active session and drives each send.

A send moves the active session ``idle -> sending -> idle``. Exactly one
user message and one assistant message are appended per accepted send,
whether the completion succeeds, fails, or is skipped because no API key
is configured. A send issued while the same session is already sending is
dropped, not queued.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from boltchat.agent.state import (
    EngineEvent,
    EngineState,
    EventKind,
    SendResult,
    SendStatus,
)
from boltchat.completion import CompletionClient, CompletionError, ErrorKind
from boltchat.credentials.store import CredentialStore
from boltchat.memory.directory import SessionDirectory
from boltchat.models.messages import MAX_MESSAGE_LENGTH, Message
from boltchat.models.sessions import Session
from boltchat.personality.loader import Persona, get_default_persona

logger = logging.getLogger(__name__)

Listener = Callable[[EngineEvent], Union[Awaitable[None], None]]

UNEXPECTED_ERROR = "An unexpected error occurred."


class SessionNotFoundError(LookupError):
    """Raised when opening a session id the directory does not know."""


class ConversationEngine:
    """Single-flight chat over one active session."""

    def __init__(
        self,
        completion_client: CompletionClient,
        credentials: CredentialStore,
        directory: SessionDirectory,
        persona: Persona | None = None,
    ) -> None:
        self._client = completion_client
        self._credentials = credentials
        self._directory = directory
        self._persona = persona or get_default_persona()
        self._session = Session.start(self._persona.welcome)
        # In-flight sessions by id; the object receiving the reply.
        self._pending: dict[str, Session] = {}
        self._deleted_in_flight: set[str] = set()
        self._listeners: list[Listener] = []

        directory.add_delete_listener(self.handle_session_deleted)

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def active_session(self) -> Session:
        return self._session

    @property
    def persona(self) -> Persona:
        return self._persona

    @property
    def state(self) -> EngineState:
        if self._session.id in self._pending:
            return EngineState.SENDING
        return EngineState.IDLE

    @property
    def is_sending(self) -> bool:
        return self.state == EngineState.SENDING

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for engine events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    async def start_new_session(self) -> Session:
        """Make a fresh session, seeded with the welcome message, active.

        The session is only persisted once the user sends something.
        """
        self._session = Session.start(self._persona.welcome)
        logger.info("Started session %s", self._session.id)
        await self._emit(
            EngineEvent(kind=EventKind.SESSION_CHANGED, session_id=self._session.id)
        )
        return self._session

    async def open_session(self, session_id: str) -> Session:
        """Resume a stored session.

        A session with a send in flight is resumed from memory so the
        pending reply lands in the log the user is looking at.
        """
        if session_id == self._session.id:
            return self._session
        session = self._pending.get(session_id)
        if session is None:
            session = await self._directory.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self._session = session
        logger.info("Opened session %s (%d messages)", session_id, session.message_count)
        await self._emit(EngineEvent(kind=EventKind.SESSION_CHANGED, session_id=session_id))
        return session

    async def handle_session_deleted(self, session_id: str) -> None:
        """Deleting the active session replaces it with a fresh one."""
        if session_id in self._pending:
            self._deleted_in_flight.add(session_id)
        if session_id == self._session.id:
            logger.info("Active session %s deleted; starting a new one", session_id)
            await self.start_new_session()

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_message(self, text: str) -> SendResult:
        """Send ``text`` from the user and append the assistant's answer.

        Empty, whitespace-only or over-long input is ignored (``invalid``).
        A call made while the active session is sending is dropped (``busy``).
        """
        session = self._session
        text = (text or "").strip()

        if not text or len(text) > MAX_MESSAGE_LENGTH:
            logger.debug("Ignoring invalid input (%d chars)", len(text))
            return SendResult(
                status=SendStatus.INVALID,
                session_id=session.id,
                error_kind=ErrorKind.INVALID_INPUT,
            )

        if session.id in self._pending:
            logger.info("Send dropped, session %s is already sending", session.id)
            return SendResult(status=SendStatus.BUSY, session_id=session.id)

        # Flag is set before the first await so concurrent callers see it.
        self._pending[session.id] = session
        notice: str | None = None
        try:
            user_message = Message.from_user(text)
            await self._append(session, user_message)
            await self._emit_state(session, EngineState.SENDING)

            status, error_kind, reply_text = await self._resolve_reply(text)
            if status == SendStatus.FAILED:
                notice = reply_text

            reply = Message.from_assistant(reply_text)
            await self._append(session, reply)
        finally:
            self._pending.pop(session.id, None)
            self._deleted_in_flight.discard(session.id)
            await self._emit_state(session, EngineState.IDLE)

        if notice is not None:
            await self._emit(
                EngineEvent(kind=EventKind.NOTICE, session_id=session.id, notice=notice)
            )

        return SendResult(
            status=status,
            session_id=session.id,
            messages=[user_message, reply],
            notice=notice,
            error_kind=error_kind,
        )

    async def _resolve_reply(
        self, text: str
    ) -> tuple[SendStatus, ErrorKind | None, str]:
        """Ask the completion endpoint; map every outcome to reply text."""
        if not self._credentials.present:
            logger.warning("No API credential configured; skipping completion request")
            return (
                SendStatus.CREDENTIAL_MISSING,
                ErrorKind.CREDENTIAL_MISSING,
                self._persona.credential_missing_reply,
            )

        try:
            reply = await self._client.complete(self._persona.system_prompt, text)
        except CompletionError as exc:
            if exc.kind == ErrorKind.CREDENTIAL_MISSING:
                return (
                    SendStatus.CREDENTIAL_MISSING,
                    exc.kind,
                    self._persona.credential_missing_reply,
                )
            logger.error("Completion failed (%s): %s", exc.kind.value, exc.user_message)
            return SendStatus.FAILED, exc.kind, f"Error: {exc.user_message}"
        except Exception:
            logger.exception("Unexpected error while requesting a completion")
            return SendStatus.FAILED, None, f"Error: {UNEXPECTED_ERROR}"

        return SendStatus.COMPLETED, None, reply

    async def _append(self, session: Session, message: Message) -> None:
        session.append(message)
        await self._emit(
            EngineEvent(
                kind=EventKind.MESSAGE_APPENDED, session_id=session.id, message=message
            )
        )
        if session.id in self._deleted_in_flight:
            return
        try:
            await self._directory.save(session)
        except Exception:
            # The in-memory log stays authoritative; the next append retries the write.
            logger.exception("Failed to persist session %s", session.id)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def _emit_state(self, session: Session, state: EngineState) -> None:
        await self._emit(
            EngineEvent(kind=EventKind.STATE_CHANGED, session_id=session.id, state=state)
        )

    async def _emit(self, event: EngineEvent) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Engine listener failed on %s", event.kind.value)
