"""Tests for the HTTP API."""

import pytest
from httpx import AsyncClient

from boltchat.agent.engine import ConversationEngine
from boltchat.credentials.store import CredentialStore
from conftest import FakeEndpoint


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Health endpoint returns 200 with service status."""
    response = await client.get("/api/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["services"]["session_store"]["status"] == "healthy"
    assert data["services"]["completion"]["status"] == "healthy"


@pytest.mark.asyncio
async def test_health_is_degraded_without_credential(
    client: AsyncClient, credentials: CredentialStore
) -> None:
    credentials.clear()
    data = (await client.get("/api/health")).json()
    assert data["status"] == "degraded"
    assert data["services"]["completion"]["status"] == "unconfigured"


@pytest.mark.asyncio
async def test_active_session_starts_with_welcome(client: AsyncClient) -> None:
    response = await client.get("/api/chat/session")
    assert response.status_code == 200

    data = response.json()
    assert data["state"] == "idle"
    assert len(data["session"]["messages"]) == 1
    assert data["session"]["messages"][0]["sender"] == "assistant"


@pytest.mark.asyncio
async def test_send_message_round_trip(client: AsyncClient, endpoint: FakeEndpoint) -> None:
    response = await client.post("/api/chat/messages", json={"text": "What is 6 * 7?"})
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "completed"
    assert [m["text"] for m in data["messages"]] == ["What is 6 * 7?", "42"]
    assert [m["sender"] for m in data["messages"]] == ["user", "assistant"]
    assert data["notice"] is None


@pytest.mark.asyncio
async def test_send_failure_is_not_an_http_error(
    client: AsyncClient, endpoint: FakeEndpoint
) -> None:
    endpoint.status_code = 500
    endpoint.body = {"error": {"message": "The server had an error"}}

    response = await client.post("/api/chat/messages", json={"text": "hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "failed"
    assert data["notice"] == "Error: The server had an error"
    assert data["messages"][-1]["text"] == data["notice"]


@pytest.mark.asyncio
async def test_blank_message_is_ignored(client: AsyncClient) -> None:
    data = (await client.post("/api/chat/messages", json={"text": "   "})).json()
    assert data["status"] == "invalid"
    assert data["error_kind"] == "invalid_input"
    assert data["messages"] == []


@pytest.mark.asyncio
async def test_new_and_open_session(
    client: AsyncClient, engine: ConversationEngine, endpoint: FakeEndpoint
) -> None:
    await client.post("/api/chat/messages", json={"text": "first chat"})
    first_id = engine.active_session.id

    response = await client.post("/api/chat/sessions")
    assert response.status_code == 200
    assert response.json()["session"]["id"] != first_id

    response = await client.post(f"/api/chat/sessions/{first_id}/open")
    assert response.status_code == 200
    assert response.json()["session"]["id"] == first_id
    assert len(response.json()["session"]["messages"]) == 3


@pytest.mark.asyncio
async def test_open_unknown_session_is_404(client: AsyncClient) -> None:
    response = await client.post("/api/chat/sessions/missing/open")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_and_history(
    client: AsyncClient, engine: ConversationEngine, endpoint: FakeEndpoint
) -> None:
    await client.post("/api/chat/messages", json={"text": "Optimizing a SQL query"})
    session_id = engine.active_session.id

    data = (await client.get("/api/sessions")).json()
    assert data["total"] == 1
    item = data["sessions"][0]
    assert item["id"] == session_id
    assert item["title"] == "Optimizing a SQL query"
    assert item["last_message_text"] == "42"
    assert item["message_count"] == 3
    assert item["tag_label"] == "SQL"
    assert item["age_label"] == "Just now"
    assert "messages" not in item

    history = (await client.get(f"/api/sessions/{session_id}/history")).json()
    assert [m["text"] for m in history["messages"][1:]] == ["Optimizing a SQL query", "42"]


@pytest.mark.asyncio
async def test_history_of_unknown_session_is_404(client: AsyncClient) -> None:
    response = await client.get("/api/sessions/missing/history")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_refresh_returns_sorted_list(
    client: AsyncClient, engine: ConversationEngine, endpoint: FakeEndpoint
) -> None:
    await client.post("/api/chat/messages", json={"text": "older"})
    older = engine.active_session.id
    await client.post("/api/chat/sessions")
    await client.post("/api/chat/messages", json={"text": "newer"})
    newer = engine.active_session.id

    # Touch the older session so it becomes the most recent.
    await client.post(f"/api/chat/sessions/{older}/open")
    await client.post("/api/chat/messages", json={"text": "bump"})

    data = (await client.post("/api/sessions/refresh")).json()
    assert [s["id"] for s in data["sessions"]] == [older, newer]


@pytest.mark.asyncio
async def test_delete_is_idempotent_and_resets_active_session(
    client: AsyncClient, engine: ConversationEngine, endpoint: FakeEndpoint
) -> None:
    await client.post("/api/chat/messages", json={"text": "delete me"})
    session_id = engine.active_session.id

    response = await client.delete(f"/api/sessions/{session_id}")
    assert response.status_code == 200
    assert response.json() == {"status": "deleted", "session_id": session_id}
    assert engine.active_session.id != session_id

    response = await client.delete(f"/api/sessions/{session_id}")
    assert response.status_code == 200
    assert response.json()["status"] == "not_found"

    assert (await client.get("/api/sessions")).json()["total"] == 0


@pytest.mark.asyncio
async def test_credential_settings(client: AsyncClient, credentials: CredentialStore) -> None:
    data = (await client.get("/api/settings/credential")).json()
    assert data["present"] is True
    assert "sk-" not in data["masked"]

    response = await client.delete("/api/settings/credential")
    assert response.json() == {"present": False, "masked": ""}
    assert not credentials.present

    response = await client.put("/api/settings/credential", json={"value": "sk-new-key"})
    assert response.status_code == 200
    assert response.json()["present"] is True
    assert credentials.get().value == "sk-new-key"


@pytest.mark.asyncio
async def test_masked_credential_is_rejected(
    client: AsyncClient, credentials: CredentialStore
) -> None:
    masked = (await client.get("/api/settings/credential")).json()["masked"]

    response = await client.put("/api/settings/credential", json={"value": masked})

    assert response.status_code == 422
    assert credentials.present


@pytest.mark.asyncio
async def test_chat_without_credential_asks_for_configuration(
    client: AsyncClient, endpoint: FakeEndpoint
) -> None:
    await client.delete("/api/settings/credential")

    data = (await client.post("/api/chat/messages", json={"text": "hello"})).json()

    assert data["status"] == "credential_missing"
    assert "configure" in data["messages"][-1]["text"]
    assert endpoint.requests == []
