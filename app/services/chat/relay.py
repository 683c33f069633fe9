"""Persist chat messages, then forward them to whoever is connected."""

import logging

from app.models.message import Message
from app.services.chat.participant import Participant, ParticipantRole
from app.services.chat.protocol import message_event
from app.services.chat.registry import ConnectionRegistry
from app.services.chat.store import MessageStore

logger = logging.getLogger(__name__)


class MessageRejected(ValueError):
    pass


class RelayEngine:
    def __init__(self, store: MessageStore, registry: ConnectionRegistry) -> None:
        self.store = store
        self.registry = registry

    def send_and_persist(
        self, sender: Participant, content: str, recipient_id: int | None = None
    ) -> Message:
        """Persist a message from ``sender`` and relay it.

        For a customer, ``recipient_id`` optionally names a connected agent; without it
        the message goes to the agent who claimed the conversation, or to every
        connected agent if nobody has. For an agent, ``recipient_id`` is the
        customer being answered and is required.

        Persistence runs before delivery and a StorageError aborts the send.
        A recipient that is not connected is not an error: the message waits
        in the store for their next fetch.
        """
        content = content.strip()
        if not content:
            raise MessageRejected("Message content is required")

        if sender.is_agent:
            if recipient_id is None:
                raise MessageRejected("customer_id is required when replying as an agent")
            customer_id, agent_id = recipient_id, sender.participant_id
        else:
            customer_id = sender.participant_id
            agent_id = None
            # Only a connected agent can be addressed; anything else falls back
            if recipient_id is not None and self.registry.lookup(recipient_id, ParticipantRole.AGENT) is not None:
                agent_id = recipient_id
            if agent_id is None:
                agent_id = self.store.claimed_agent(customer_id)

        message = self.store.create_message(customer_id, agent_id, content)
        self._deliver(sender, message)
        return message

    def _deliver(self, sender: Participant, message: Message) -> int:
        event = message_event(message)

        if sender.is_agent:
            return self._send_to(message.customer_id, ParticipantRole.CUSTOMER, event)

        if message.agent_id is not None:
            return self._send_to(message.agent_id, ParticipantRole.AGENT, event)

        channels = self.registry.channels_by_role(ParticipantRole.AGENT)
        if not channels:
            logger.debug("No agents online for message %s, left pending", message.id)
        return sum(1 for channel in channels if channel.send(event))

    def _send_to(self, participant_id: int, role: ParticipantRole, event: dict) -> int:
        channel = self.registry.lookup(participant_id, role)
        if channel is None:
            logger.debug("%s %s offline, message left pending", role.value, participant_id)
            return 0
        return 1 if channel.send(event) else 0
