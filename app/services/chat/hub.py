"""Wires the chat components together for one application process."""

import logging

from sqlalchemy import Engine

from app.services.chat.participant import Participant
from app.services.chat.read_state import ReadStateTracker
from app.services.chat.registry import Channel, ConnectionRegistry
from app.services.chat.relay import RelayEngine
from app.services.chat.store import MessageStore

logger = logging.getLogger(__name__)


class ChatHub:
    def __init__(self, engine: Engine) -> None:
        self.store = MessageStore(engine)
        self.registry = ConnectionRegistry()
        self.relay = RelayEngine(self.store, self.registry)
        self.read_state = ReadStateTracker(self.store, self.registry)

    def connect(self, participant: Participant, channel: Channel) -> None:
        self.registry.register(participant.participant_id, participant.role, channel)
        logger.info(
            "Chat connected: %s %s (online=%d)",
            participant.role.value,
            participant.participant_id,
            len(self.registry),
        )

    def disconnect(self, participant: Participant, channel: Channel) -> None:
        if self.registry.unregister(participant.participant_id, channel):
            logger.info("Chat disconnected: %s %s", participant.role.value, participant.participant_id)
