"""Chat endpoints: REST for the active session plus a WebSocket channel."""

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from boltchat.agent.engine import ConversationEngine, SessionNotFoundError
from boltchat.agent.state import EngineEvent, EngineState, EventKind, SendResult, SendStatus
from boltchat.dependencies import get_engine
from boltchat.models.messages import (
    IncomingMessage,
    MessageType,
    OutgoingMessage,
    SendMessageRequest,
)
from boltchat.models.sessions import Session

logger = logging.getLogger(__name__)
router = APIRouter()


class ActiveSessionResponse(BaseModel):
    """The session the engine is currently working on."""

    session: Session
    state: EngineState


def _active(engine: ConversationEngine) -> ActiveSessionResponse:
    return ActiveSessionResponse(session=engine.active_session, state=engine.state)


@router.get("/session", response_model=ActiveSessionResponse)
async def get_active_session(
    engine: ConversationEngine = Depends(get_engine),
) -> ActiveSessionResponse:
    """Return the active session and whether a reply is pending."""
    return _active(engine)


@router.post("/messages", response_model=SendResult)
async def send_message(
    body: SendMessageRequest,
    engine: ConversationEngine = Depends(get_engine),
) -> SendResult:
    """Send a user message and wait for the assistant's reply.

    Failures are reported inside the result (``status`` and ``notice``),
    never as an HTTP error.
    """
    return await engine.send_message(body.text)


@router.post("/sessions", response_model=ActiveSessionResponse)
async def start_session(
    engine: ConversationEngine = Depends(get_engine),
) -> ActiveSessionResponse:
    """Start a fresh conversation."""
    await engine.start_new_session()
    return _active(engine)


@router.post("/sessions/{session_id}/open", response_model=ActiveSessionResponse)
async def open_session(
    session_id: str,
    engine: ConversationEngine = Depends(get_engine),
) -> ActiveSessionResponse:
    """Resume a past conversation."""
    try:
        await engine.open_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return _active(engine)


async def websocket_chat(
    websocket: WebSocket,
    engine: ConversationEngine = Depends(get_engine),
) -> None:
    """Handle WebSocket connections for real-time chat.

    Protocol:
        Client sends JSON: {"type": "text", "content": "..."}
        Server sends JSON: {"type": "text"|"status"|"error", "content": "...",
                            "session_id": "...", "timestamp": "..."}

    Failure notices from the engine arrive as ``error`` frames; the inline
    assistant message carrying the same text follows as a ``text`` frame.
    """
    await websocket.accept()
    logger.info("WebSocket connected: session_id=%s", engine.active_session.id)

    await _send_message(websocket, MessageType.STATUS, "Connected", engine.active_session.id)

    async def forward(event: EngineEvent) -> None:
        if event.kind == EventKind.NOTICE and event.notice:
            await _send_message(websocket, MessageType.ERROR, event.notice, event.session_id)
        elif event.kind == EventKind.STATE_CHANGED and event.state == EngineState.SENDING:
            await _send_message(websocket, MessageType.STATUS, "Thinking...", event.session_id)

    unsubscribe = engine.subscribe(forward)
    try:
        while True:
            raw = await websocket.receive_text()

            try:
                incoming = IncomingMessage.model_validate_json(raw)
            except ValidationError:
                await _send_message(
                    websocket, MessageType.ERROR, "Invalid JSON", engine.active_session.id
                )
                continue

            if not incoming.is_text():
                await _send_message(
                    websocket,
                    MessageType.ERROR,
                    "Empty or unsupported message",
                    engine.active_session.id,
                )
                continue

            result = await engine.send_message(incoming.content or "")
            await _send_result(websocket, result)

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        unsubscribe()


async def _send_result(websocket: WebSocket, result: SendResult) -> None:
    if result.status == SendStatus.INVALID:
        await _send_message(
            websocket, MessageType.ERROR, "Empty or unsupported message", result.session_id
        )
    elif result.status == SendStatus.BUSY:
        await _send_message(
            websocket, MessageType.STATUS, "Still working on the previous message", result.session_id
        )
    elif result.reply is not None:
        await _send_message(websocket, MessageType.TEXT, result.reply.text, result.session_id)


async def _send_message(
    websocket: WebSocket,
    msg_type: MessageType,
    content: str,
    session_id: str,
) -> None:
    """Send a structured JSON message over the WebSocket."""
    frame = OutgoingMessage(type=msg_type, content=content, session_id=session_id)
    await websocket.send_json(frame.model_dump(mode="json"))
