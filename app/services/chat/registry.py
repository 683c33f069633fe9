"""In-process registry of live chat connections, one per participant."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Protocol

from app.services.chat.participant import ParticipantRole

logger = logging.getLogger(__name__)


class Channel(Protocol):
    def send(self, event: dict[str, Any]) -> bool:
        """Queue an event for the peer without blocking."""
        ...


@dataclass(frozen=True)
class ConnectionEntry:
    participant_id: int
    role: ParticipantRole
    channel: Channel


class ConnectionRegistry:
    """Maps participant ids to their current channel.

    Process-local: a participant connected to another worker process is
    not visible here. A second registration for the same id replaces the
    first (no multi-device fan-out).
    """

    def __init__(self) -> None:
        self._entries: dict[int, ConnectionEntry] = {}
        self._lock = threading.Lock()

    def register(
        self, participant_id: int, role: ParticipantRole, channel: Channel
    ) -> ConnectionEntry | None:
        """Insert or replace the entry. Returns the superseded entry, if any."""
        entry = ConnectionEntry(participant_id, role, channel)
        with self._lock:
            previous = self._entries.get(participant_id)
            self._entries[participant_id] = entry
        if previous is not None:
            logger.info("Participant %s reconnected, replacing previous channel", participant_id)
        return previous

    def unregister(self, participant_id: int, channel: Channel | None = None) -> bool:
        """Remove the entry if present.

        With ``channel`` given, only removes the entry while it still points at
        that channel, so a superseded connection closing late leaves the
        newer one registered.
        """
        with self._lock:
            entry = self._entries.get(participant_id)
            if entry is None:
                return False
            if channel is not None and entry.channel is not channel:
                return False
            del self._entries[participant_id]
            return True

    def lookup(self, participant_id: int, role: ParticipantRole | None = None) -> Channel | None:
        with self._lock:
            entry = self._entries.get(participant_id)
        if entry is None or (role is not None and entry.role is not role):
            return None
        return entry.channel

    def list_by_role(self, role: ParticipantRole) -> list[int]:
        with self._lock:
            return [e.participant_id for e in self._entries.values() if e.role is role]

    def channels_by_role(self, role: ParticipantRole) -> list[Channel]:
        with self._lock:
            return [e.channel for e in self._entries.values() if e.role is role]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
