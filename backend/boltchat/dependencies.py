"""Dependency injection providers for FastAPI."""

from boltchat.agent.engine import ConversationEngine
from boltchat.completion import CompletionClient
from boltchat.config import settings
from boltchat.credentials.store import CredentialStore
from boltchat.memory.chat_store import (
    InMemorySessionStore,
    MongoSessionStore,
    SessionStore,
)
from boltchat.memory.directory import SessionDirectory

# Global singleton instances (thread-safe for async contexts)
_credential_store: CredentialStore | None = None
_completion_client: CompletionClient | None = None
_session_directory: SessionDirectory | None = None
_engine: ConversationEngine | None = None


def _build_session_store() -> SessionStore:
    if settings.session_backend == "mongodb":
        return MongoSessionStore(settings.mongodb_uri, settings.mongodb_database)
    return InMemorySessionStore()


def get_credential_store() -> CredentialStore:
    """Return singleton CredentialStore, seeded from OPENAI_API_KEY."""
    global _credential_store
    if _credential_store is None:
        _credential_store = CredentialStore(settings.openai_api_key)
    return _credential_store


def get_completion_client() -> CompletionClient:
    """Return singleton CompletionClient instance."""
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient(get_credential_store(), settings)
    return _completion_client


def get_session_directory() -> SessionDirectory:
    """Return singleton SessionDirectory instance."""
    global _session_directory
    if _session_directory is None:
        _session_directory = SessionDirectory(_build_session_store())
    return _session_directory


def get_engine() -> ConversationEngine:
    """Return singleton ConversationEngine instance."""
    global _engine
    if _engine is None:
        _engine = ConversationEngine(
            get_completion_client(),
            get_credential_store(),
            get_session_directory(),
        )
    return _engine
