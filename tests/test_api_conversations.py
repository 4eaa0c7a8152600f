"""Tests for conversation CRUD and stats endpoints."""

import asyncio
from datetime import datetime, timedelta, timezone

from chatmemory.models.conversation import ChatMessage, Conversation, MessageType


def _seed_conversation(store, title="Test Chat", messages=None, updated_at=None):
    """Insert a conversation + messages through the store."""
    async def run():
        conv = Conversation(title=title)
        if updated_at:
            conv.created_at = conv.last_updated_at = updated_at
        cid = await store.save_conversation(conv)
        if messages:
            await store.save_messages(
                [ChatMessage(text=text, type=MessageType(kind)) for kind, text in messages], cid
            )
        return cid

    return asyncio.run(run())


def test_list_conversations_empty(client):
    response = client.get("/api/conversations/")
    assert response.status_code == 200
    assert response.json() == []


def test_list_conversations(client, store):
    now = datetime.now(timezone.utc)
    _seed_conversation(store, "Chat A", updated_at=now - timedelta(hours=1))
    _seed_conversation(store, "Chat B", updated_at=now)
    response = client.get("/api/conversations/")
    assert response.status_code == 200
    data = response.json()
    assert [c["title"] for c in data] == ["Chat B", "Chat A"]


def test_get_conversation(client, store):
    cid = _seed_conversation(store, "My Chat", [("user", "hello"), ("bot", "hi there")])
    response = client.get(f"/api/conversations/{cid}")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "My Chat"
    assert len(data["messages"]) == 2
    assert data["messages"][0]["type"] == "user"
    assert data["messages"][0]["text"] == "hello"
    assert data["messages"][0]["style"]["alignment"] == "end"
    assert data["messages"][1]["type"] == "bot"
    assert data["messages"][1]["order"] == 1
    assert data["messages"][1]["style"]["color"] == "#FFFFFF"


def test_get_conversation_not_found(client):
    response = client.get("/api/conversations/9999")
    assert response.status_code == 404


def test_delete_conversation(client, store):
    cid = _seed_conversation(store, "To Delete", [("user", "bye")])
    response = client.delete(f"/api/conversations/{cid}")
    assert response.status_code == 200
    assert response.json()["status"] == "deleted"

    # Verify it's gone
    response = client.get(f"/api/conversations/{cid}")
    assert response.status_code == 404
    assert asyncio.run(store.get_messages(cid)) == []


def test_delete_conversation_not_found(client):
    response = client.delete("/api/conversations/9999")
    assert response.status_code == 404


def test_stats(client, store):
    _seed_conversation(store, "One", [("user", "a"), ("bot", "b"), ("user", "c")])
    _seed_conversation(store, "Two", [("user", "d"), ("bot", "e")])
    response = client.get("/api/stats/")
    assert response.status_code == 200
    assert response.json() == {"user": 3, "bot": 2, "total": 5, "conversations": 2}


def test_timestamps_serialised_with_utc_offset(client, store):
    cid = _seed_conversation(store, "Stamped", [("user", "hello")])

    listed = client.get("/api/conversations/").json()[0]
    detail = client.get(f"/api/conversations/{cid}").json()
    stamps = [
        listed["created_at"],
        listed["last_updated_at"],
        detail["created_at"],
        detail["last_updated_at"],
        detail["messages"][0]["timestamp"],
    ]
    assert all(s.endswith("+00:00") for s in stamps)
