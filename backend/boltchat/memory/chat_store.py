"""Session storage backends: one record per session, messages embedded.

Document schema (MongoDB)::

    {
        "session_id": "3f2a...",
        "title": "How do I memoize a selector?",
        "created_at": ISODate("2026-10-18T10:30:00Z"),
        "updated_at": ISODate("2026-10-18T10:30:02Z"),
        "messages": [
            {
                "id": "9b1c...",
                "text": "How do I memoize a selector?",
                "sender": "user",
                "created_at": ISODate("2026-10-18T10:30:00Z")
            },
            ...
        ]
    }

The conversation engine and the session directory only depend on the
:class:`SessionStore` interface; which backend is used is a configuration
choice (``SESSION_BACKEND``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import DESCENDING

from boltchat.models.sessions import Session

logger = logging.getLogger(__name__)

COLLECTION_NAME = "chat_sessions"
LIST_LIMIT = 100


class SessionStore(ABC):
    """Key-value style storage for whole sessions."""

    async def initialize(self) -> None:
        """Open connections; no-op for backends that need none."""

    async def close(self) -> None:
        """Release connections."""

    async def ping(self) -> bool:
        return True

    @abstractmethod
    async def get(self, session_id: str) -> Session | None: ...

    @abstractmethod
    async def put(self, session: Session) -> None: ...

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Remove a session; ``False`` if it was not stored."""

    @abstractmethod
    async def list(self) -> list[Session]:
        """All stored sessions, most recently updated first."""


class InMemorySessionStore(SessionStore):
    """Process-local store. Sessions are copied in and out."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    async def get(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        return session.model_copy(deep=True) if session else None

    async def put(self, session: Session) -> None:
        self._sessions[session.id] = session.model_copy(deep=True)

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def list(self) -> list[Session]:
        sessions = sorted(
            self._sessions.values(), key=lambda s: s.updated_at, reverse=True
        )
        return [s.model_copy(deep=True) for s in sessions]


def _session_to_doc(session: Session) -> dict[str, Any]:
    doc = session.model_dump(mode="python")
    doc["session_id"] = doc.pop("id")
    doc["messages"] = [
        {**message, "sender": message["sender"].value} for message in doc["messages"]
    ]
    return doc


def _doc_to_session(doc: dict[str, Any]) -> Session:
    data = {k: v for k, v in doc.items() if k not in ("_id", "session_id")}
    data["id"] = doc["session_id"]
    return Session.model_validate(data)


class MongoSessionStore(SessionStore):
    """MongoDB store using motor; one document per session."""

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        collection_name: str = COLLECTION_NAME,
    ) -> None:
        self._connection_string = connection_string
        self._database_name = database_name
        self._collection_name = collection_name
        self._client: AsyncIOMotorClient | None = None
        self._collection: AsyncIOMotorCollection | None = None

    async def initialize(self) -> None:
        if self._client is not None:
            logger.warning("MongoSessionStore already initialized - skipping")
            return

        logger.info("Connecting to MongoDB at %s", self._connection_string)
        self._client = AsyncIOMotorClient(
            self._connection_string,
            serverSelectionTimeoutMS=5_000,
            tz_aware=True,
        )
        await self._client.admin.command("ping")
        self._collection = self._client[self._database_name][self._collection_name]

        # Ensure index on session_id for fast lookups
        await self._collection.create_index("session_id", unique=True)
        await self._collection.create_index([("updated_at", DESCENDING)])
        logger.info("MongoDB connection established")

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._collection = None
            logger.info("MongoDB connection closed")

    @property
    def collection(self) -> AsyncIOMotorCollection:
        if self._collection is None:
            raise RuntimeError(
                "MongoSessionStore not initialized - call initialize() first"
            )
        return self._collection

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except Exception as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False
        return True

    async def get(self, session_id: str) -> Session | None:
        doc = await self.collection.find_one({"session_id": session_id}, {"_id": 0})
        return _doc_to_session(doc) if doc else None

    async def put(self, session: Session) -> None:
        await self.collection.replace_one(
            {"session_id": session.id},
            _session_to_doc(session),
            upsert=True,
        )

    async def delete(self, session_id: str) -> bool:
        result = await self.collection.delete_one({"session_id": session_id})
        return result.deleted_count > 0

    async def list(self) -> list[Session]:
        cursor = (
            self.collection.find({}, {"_id": 0})
            .sort("updated_at", DESCENDING)
            .limit(LIST_LIMIT)
        )
        return [_doc_to_session(doc) async for doc in cursor]
