from app.services.chat.admission import AdmissionError, InvalidCredential, MissingCredential, admit
from app.services.chat.hub import ChatHub
from app.services.chat.participant import Participant, ParticipantRole
from app.services.chat.relay import MessageRejected
from app.services.chat.store import StorageError

__all__ = [
    "AdmissionError",
    "ChatHub",
    "InvalidCredential",
    "MessageRejected",
    "MissingCredential",
    "Participant",
    "ParticipantRole",
    "StorageError",
    "admit",
]
