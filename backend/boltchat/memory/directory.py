"""Session directory: the list of past conversations.

Keeps a cached list of :class:`SessionSummary` projections on top of a
:class:`SessionStore`. Summaries are always regenerated from a full
session, never edited in place.
"""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Union

from boltchat.memory.chat_store import SessionStore
from boltchat.models.sessions import Session, SessionSummary

logger = logging.getLogger(__name__)

DeleteListener = Callable[[str], Union[Awaitable[None], None]]


class SessionDirectory:
    """Lists, saves and deletes sessions for the history screen.

    Lifecycle:
        directory = SessionDirectory(store)
        await directory.initialize()   # opens the store, loads summaries
        ...
        await directory.close()
    """

    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._summaries: list[SessionSummary] | None = None
        self._delete_listeners: list[DeleteListener] = []

    async def initialize(self) -> None:
        await self._store.initialize()
        await self.refresh()

    async def close(self) -> None:
        await self._store.close()

    @property
    def store(self) -> SessionStore:
        return self._store

    def add_delete_listener(self, listener: DeleteListener) -> None:
        """Call ``listener(session_id)`` after every effective delete."""
        self._delete_listeners.append(listener)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list(self) -> list[SessionSummary]:
        """Cached summaries; most recent first as of the last refresh."""
        if self._summaries is None:
            await self.refresh()
        return list(self._summaries or [])

    async def refresh(self) -> list[SessionSummary]:
        """Reload from the store and re-sort by recency."""
        sessions = await self._store.list()
        summaries = [SessionSummary.from_session(s) for s in sessions]
        summaries.sort(key=lambda s: s.timestamp, reverse=True)
        self._summaries = summaries
        logger.debug("Session directory refreshed: %d sessions", len(summaries))
        return list(summaries)

    # ------------------------------------------------------------------
    # Single sessions
    # ------------------------------------------------------------------

    async def get(self, session_id: str) -> Session | None:
        return await self._store.get(session_id)

    async def save(self, session: Session) -> SessionSummary:
        """Persist ``session`` and upsert its summary.

        An existing summary keeps its position until the next refresh; a
        new session goes to the top.
        """
        await self._store.put(session)
        summary = SessionSummary.from_session(session)

        if self._summaries is None:
            self._summaries = []
        for index, existing in enumerate(self._summaries):
            if existing.id == session.id:
                self._summaries[index] = summary
                break
        else:
            self._summaries.insert(0, summary)
        return summary

    async def delete(self, session_id: str) -> bool:
        """Delete a session. Deleting an unknown id is a no-op returning ``False``."""
        removed = await self._store.delete(session_id)
        if self._summaries is not None:
            before = len(self._summaries)
            self._summaries = [s for s in self._summaries if s.id != session_id]
            removed = removed or len(self._summaries) != before

        if not removed:
            logger.debug("Delete ignored, session %s not found", session_id)
            return False

        logger.info("Deleted session %s", session_id)
        for listener in self._delete_listeners:
            result = listener(session_id)
            if inspect.isawaitable(result):
                await result
        return True
