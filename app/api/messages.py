"""REST access to support conversations, mirroring the realtime channel."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.dependencies import get_chat_hub, get_current_participant
from app.services.chat import ChatHub, MessageRejected, Participant, StorageError
from app.services.chat.protocol import message_payload

router = APIRouter()
logger = logging.getLogger(__name__)

CurrentParticipant = Annotated[Participant, Depends(get_current_participant)]
Hub = Annotated[ChatHub, Depends(get_chat_hub)]


class MessageCreate(BaseModel):
    content: str
    customer_id: int | None = None
    agent_id: int | None = None


class MarkRead(BaseModel):
    customer_id: int | None = None


def _storage_unavailable(e: StorageError) -> HTTPException:
    logger.error("Chat storage failure: %s", e)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Chat storage unavailable")


@router.get("/")
async def list_messages(participant: CurrentParticipant, hub: Hub, customer_id: int | None = None):
    try:
        if not participant.is_agent:
            return [message_payload(m) for m in hub.store.list_by_customer(participant.participant_id)]

        if customer_id is not None:
            return [message_payload(m) for m in hub.store.list_by_customer(customer_id)]

        return [
            {
                "customer_id": s.customer_id,
                "unread_count": s.unread_count,
                "message_count": s.message_count,
                "last_message_at": s.last_message_at.isoformat(),
                "last_message": s.last_message,
            }
            for s in hub.store.conversation_summaries()
        ]
    except StorageError as e:
        raise _storage_unavailable(e)


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_message(body: MessageCreate, participant: CurrentParticipant, hub: Hub):
    recipient = body.customer_id if participant.is_agent else body.agent_id
    try:
        message = hub.relay.send_and_persist(participant, body.content, recipient)
    except MessageRejected as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise _storage_unavailable(e)
    return message_payload(message)


@router.patch("/read")
async def mark_read(body: MarkRead, participant: CurrentParticipant, hub: Hub):
    if participant.is_agent:
        if body.customer_id is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="customer_id is required")
        customer_id = body.customer_id
    else:
        if body.customer_id is not None and body.customer_id != participant.participant_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your conversation")
        customer_id = participant.participant_id

    try:
        updated = hub.read_state.mark_read(customer_id)
    except StorageError as e:
        raise _storage_unavailable(e)
    return {"success": True, "updated": updated}
