from dataclasses import dataclass
from enum import Enum


class ParticipantRole(str, Enum):
    CUSTOMER = "customer"
    AGENT = "agent"

    @classmethod
    def from_account_role(cls, account_role: str | None) -> "ParticipantRole":
        """Site admins staff the support desk; every other account is a customer."""
        return cls.AGENT if account_role == "admin" else cls.CUSTOMER


@dataclass(frozen=True)
class Participant:
    participant_id: int
    role: ParticipantRole

    @property
    def is_agent(self) -> bool:
        return self.role is ParticipantRole.AGENT
