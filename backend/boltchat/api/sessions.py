"""Session history endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from boltchat.agent.engine import ConversationEngine
from boltchat.dependencies import get_engine, get_session_directory
from boltchat.memory.directory import SessionDirectory
from boltchat.models.sessions import SessionListItem, SessionListResponse, SessionSummary

logger = logging.getLogger(__name__)
router = APIRouter()


def _to_response(summaries: list[SessionSummary]) -> SessionListResponse:
    items = [SessionListItem.from_summary(s) for s in summaries]
    return SessionListResponse(sessions=items, total=len(items))


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    directory: SessionDirectory = Depends(get_session_directory),
) -> SessionListResponse:
    """Return past sessions as summaries (never full message bodies)."""
    return _to_response(await directory.list())


@router.post("/refresh", response_model=SessionListResponse)
async def refresh_sessions(
    directory: SessionDirectory = Depends(get_session_directory),
) -> SessionListResponse:
    """Reload sessions from storage, most recent first."""
    return _to_response(await directory.refresh())


@router.get("/{session_id}/history")
async def get_session_history(
    session_id: str,
    directory: SessionDirectory = Depends(get_session_directory),
    engine: ConversationEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Return the full message history for a session."""
    if engine.active_session.id == session_id:
        session = engine.active_session
    else:
        session = await directory.get(session_id)

    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    return {
        "session_id": session.id,
        "title": session.title,
        "messages": [m.model_dump(mode="json") for m in session.messages],
    }


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    directory: SessionDirectory = Depends(get_session_directory),
) -> dict[str, str]:
    """Delete a chat session and its history.

    Deleting an unknown or already deleted session is not an error.
    """
    removed = await directory.delete(session_id)
    return {"status": "deleted" if removed else "not_found", "session_id": session_id}
