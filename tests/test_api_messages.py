"""Tests for the message REST endpoints."""

from unittest.mock import patch

from app.services.chat import StorageError
from tests.conftest import auth_headers

CUSTOMER = auth_headers(7)
OTHER_CUSTOMER = auth_headers(8)
AGENT = auth_headers(1, "admin")


def _send(client, headers, **body):
    response = client.post("/api/messages/", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_requires_authentication(client):
    assert client.get("/api/messages/").status_code == 401
    assert client.get("/api/messages/", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_customer_sends_without_agent(client):
    msg = _send(client, CUSTOMER, content="Hello, is anyone there?")
    assert msg["customer_id"] == 7
    assert msg["agent_id"] is None
    assert msg["is_read"] is False
    assert isinstance(msg["id"], int)


def test_customer_only_sees_own_conversation(client):
    _send(client, CUSTOMER, content="mine")
    _send(client, OTHER_CUSTOMER, content="theirs")

    data = client.get("/api/messages/", headers=CUSTOMER).json()
    assert [m["content"] for m in data] == ["mine"]


def test_customer_cannot_read_other_conversation_via_query(client):
    _send(client, OTHER_CUSTOMER, content="theirs")
    data = client.get("/api/messages/", headers=CUSTOMER, params={"customer_id": 8}).json()
    assert data == []


def test_agent_reply_and_conversation_order(client):
    first = _send(client, CUSTOMER, content="Hello, is anyone there?")
    reply = _send(client, AGENT, content="Hi, how can we help?", customer_id=7)
    assert reply["agent_id"] == 1

    data = client.get("/api/messages/", headers=AGENT, params={"customer_id": 7}).json()
    assert [m["id"] for m in data] == [first["id"], reply["id"]]


def test_agent_reply_without_customer_rejected(client):
    response = client.post("/api/messages/", json={"content": "hi"}, headers=AGENT)
    assert response.status_code == 400


def test_empty_content_rejected(client):
    response = client.post("/api/messages/", json={"content": ""}, headers=CUSTOMER)
    assert response.status_code == 400


def test_agent_sees_conversation_summaries(client):
    _send(client, CUSTOMER, content="Hello, is anyone there?")
    _send(client, OTHER_CUSTOMER, content="booking question")
    _send(client, OTHER_CUSTOMER, content="are you open sunday?")

    data = client.get("/api/messages/", headers=AGENT).json()
    assert [s["customer_id"] for s in data] == [8, 7]
    assert data[0]["unread_count"] == 2
    assert data[0]["last_message"] == "are you open sunday?"
    assert data[1]["unread_count"] == 1


def test_agent_marks_conversation_read(client):
    _send(client, CUSTOMER, content="hi")
    response = client.patch("/api/messages/read", json={"customer_id": 7}, headers=AGENT)
    assert response.json() == {"success": True, "updated": 1}

    again = client.patch("/api/messages/read", json={"customer_id": 7}, headers=AGENT)
    assert again.json() == {"success": True, "updated": 0}

    summaries = client.get("/api/messages/", headers=AGENT).json()
    assert summaries[0]["unread_count"] == 0


def test_agent_mark_read_requires_customer(client):
    response = client.patch("/api/messages/read", json={}, headers=AGENT)
    assert response.status_code == 400


def test_customer_marks_own_conversation_read(client):
    _send(client, CUSTOMER, content="hi")
    response = client.patch("/api/messages/read", json={}, headers=CUSTOMER)
    assert response.json()["updated"] == 1


def test_customer_cannot_mark_other_conversation(client):
    response = client.patch("/api/messages/read", json={"customer_id": 8}, headers=CUSTOMER)
    assert response.status_code == 403


def test_storage_failure_returns_503(client):
    with patch(
        "app.services.chat.store.MessageStore.create_message",
        side_effect=StorageError("down"),
    ):
        response = client.post("/api/messages/", json={"content": "hi"}, headers=CUSTOMER)
    assert response.status_code == 503
    assert client.get("/api/messages/", headers=CUSTOMER).json() == []
