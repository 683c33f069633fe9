import logging

from app.services.chat.participant import ParticipantRole
from app.services.chat.protocol import messages_read_event
from app.services.chat.registry import ConnectionRegistry
from app.services.chat.store import MessageStore

logger = logging.getLogger(__name__)


class ReadStateTracker:
    def __init__(self, store: MessageStore, registry: ConnectionRegistry) -> None:
        self.store = store
        self.registry = registry

    def mark_read(self, customer_id: int) -> int:
        """Mark a conversation read and tell the customer and every agent.

        Idempotent; returns how many messages changed state.
        """
        updated = self.store.set_read_by_customer(customer_id)
        logger.debug("Marked %d messages read for customer %s", updated, customer_id)

        event = messages_read_event(customer_id)
        customer_channel = self.registry.lookup(customer_id, ParticipantRole.CUSTOMER)
        if customer_channel is not None:
            customer_channel.send(event)
        for channel in self.registry.channels_by_role(ParticipantRole.AGENT):
            channel.send(event)
        return updated
