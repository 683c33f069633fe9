"""Credential check gating entry into the connection registry."""

import logging

from jose import JWTError

from app.core.security import decode_token
from app.services.chat.participant import Participant, ParticipantRole

logger = logging.getLogger(__name__)


class AdmissionError(Exception):
    pass


class MissingCredential(AdmissionError):
    pass


class InvalidCredential(AdmissionError):
    pass


def admit(token: str | None) -> Participant:
    """Validate an access token and return who it belongs to.

    Uses the same verification as authenticated HTTP requests. Never falls
    back to an anonymous participant.
    """
    if not token:
        raise MissingCredential("Authentication required")

    try:
        payload = decode_token(token, expected_type="access")
    except JWTError as e:
        logger.warning("Rejected chat credential: %s", e)
        raise InvalidCredential("Invalid token") from e

    try:
        participant_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Rejected chat credential: bad subject claim")
        raise InvalidCredential("Invalid token payload") from e

    return Participant(participant_id, ParticipantRole.from_account_role(payload.get("role")))
