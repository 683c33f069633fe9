"""Realtime support chat over WebSocket.

Connect with ``/api/chat/ws?token=<access token>``. Frames are JSON
envelopes, see ``app.services.chat.protocol``.
"""

import logging

from fastapi import APIRouter, Query, WebSocket, status

from app.core.config import settings
from app.services.chat import (
    AdmissionError,
    ChatHub,
    MessageRejected,
    Participant,
    StorageError,
    admit,
)
from app.services.chat.channel import WebSocketChannel
from app.services.chat.protocol import (
    MalformedPayload,
    MarkReadEvent,
    PingEvent,
    SendMessageEvent,
    connected_event,
    error_event,
    message_event,
    parse_client_event,
    pong_event,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket, token: str | None = Query(default=None)):
    try:
        participant = admit(token)
    except AdmissionError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    hub: ChatHub = websocket.app.state.chat
    await websocket.accept()

    label = f"{participant.role.value}:{participant.participant_id}"
    channel = WebSocketChannel(websocket, label, max_queue=settings.send_queue_size)
    channel.start()
    hub.connect(participant, channel)
    channel.send(connected_event(participant.participant_id, participant.role.value))

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                logger.warning("Dropped binary frame from %s", channel.label)
                channel.send(error_event("Frames must be JSON text"))
                continue
            _handle_frame(hub, participant, channel, raw)
    finally:
        hub.disconnect(participant, channel)
        await channel.close()


def _handle_frame(hub: ChatHub, participant: Participant, channel: WebSocketChannel, raw: str) -> None:
    try:
        event = parse_client_event(raw)
    except MalformedPayload as e:
        logger.warning("Dropped frame from %s: %s", channel.label, e)
        channel.send(error_event(str(e)))
        return

    if event is None:
        logger.debug("Ignoring unknown event from %s", channel.label)
        return

    if isinstance(event, PingEvent):
        channel.send(pong_event())
        return

    try:
        if isinstance(event, SendMessageEvent):
            recipient = event.customer_id if participant.is_agent else event.agent_id
            message = hub.relay.send_and_persist(participant, event.content, recipient)
            # Sender renders its own copy from the persisted record
            channel.send(message_event(message))
        elif isinstance(event, MarkReadEvent):
            customer_id = _read_target(participant, event.customer_id)
            hub.read_state.mark_read(customer_id)
    except MessageRejected as e:
        channel.send(error_event(str(e)))
    except StorageError as e:
        logger.error("Chat storage failure for %s: %s", channel.label, e)
        channel.send(error_event("Message could not be saved, please retry"))


def _read_target(participant: Participant, customer_id: int | None) -> int:
    if participant.is_agent:
        if customer_id is None:
            raise MessageRejected("customer_id is required")
        return customer_id
    if customer_id is not None and customer_id != participant.participant_id:
        raise MessageRejected("Customers can only mark their own conversation read")
    return participant.participant_id
