"""Realtime wire format: ``{"type": <kind>, "data": {...}}`` in both directions."""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from app.models.message import Message


class MalformedPayload(Exception):
    pass


# --- Client -> server ---

class SendMessageEvent(BaseModel):
    type: Literal["message"]
    content: str
    customer_id: int | None = None
    agent_id: int | None = None


class MarkReadEvent(BaseModel):
    type: Literal["mark_read"]
    customer_id: int | None = None


class PingEvent(BaseModel):
    type: Literal["ping"]


ClientEvent = Annotated[
    Union[SendMessageEvent, MarkReadEvent, PingEvent],
    Field(discriminator="type"),
]

_client_event_adapter: TypeAdapter[ClientEvent] = TypeAdapter(ClientEvent)
CLIENT_EVENT_TYPES = {"message", "mark_read", "ping"}


def parse_client_event(raw: str) -> SendMessageEvent | MarkReadEvent | PingEvent | None:
    """Parse one text frame.

    Returns None for a well-formed envelope of an unknown kind, which callers
    ignore. Raises MalformedPayload for anything else that cannot be handled.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedPayload("Frame is not valid JSON") from e

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        raise MalformedPayload("Frame must be an object with a string 'type'")
    if data["type"] not in CLIENT_EVENT_TYPES:
        return None

    try:
        return _client_event_adapter.validate_python(data)
    except ValidationError as e:
        raise MalformedPayload(f"Invalid '{data['type']}' event") from e


# --- Server -> client ---

def _envelope(kind: str, data: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"type": kind, "data": data or {}}


def message_payload(message: Message) -> dict[str, Any]:
    """Wire form of a message, shared by the realtime and REST paths."""
    return {
        "id": message.id,
        "customer_id": message.customer_id,
        "agent_id": message.agent_id,
        "content": message.content,
        "timestamp": message.timestamp.isoformat(),
        "is_read": message.is_read,
    }


def message_event(message: Message) -> dict[str, Any]:
    return _envelope("message", message_payload(message))


def messages_read_event(customer_id: int) -> dict[str, Any]:
    return _envelope("messages_read", {"customer_id": customer_id})


def connected_event(participant_id: int, role: str) -> dict[str, Any]:
    return _envelope("connected", {"participant_id": participant_id, "role": role})


def error_event(detail: str) -> dict[str, Any]:
    return _envelope("error", {"detail": detail})


def pong_event() -> dict[str, Any]:
    return _envelope("pong")
