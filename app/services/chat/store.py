"""Message persistence and read-state for support conversations."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Engine, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.models.message import Message

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


def _as_utc(msg: Message) -> Message:
    # SQLite drops tzinfo; every timestamp in this table is UTC
    if msg.timestamp.tzinfo is None:
        msg.timestamp = msg.timestamp.replace(tzinfo=timezone.utc)
    return msg


@dataclass
class ConversationSummary:
    customer_id: int
    unread_count: int
    message_count: int
    last_message_at: datetime
    last_message: str


class MessageStore:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def create_message(self, customer_id: int, agent_id: int | None, content: str) -> Message:
        try:
            with Session(self._engine) as session:
                msg = Message(
                    customer_id=customer_id,
                    agent_id=agent_id,
                    content=content,
                    timestamp=datetime.now(timezone.utc),
                    is_read=False,
                )
                session.add(msg)
                session.commit()
                session.refresh(msg)
                return _as_utc(msg)
        except SQLAlchemyError as e:
            logger.error("Failed to save message for customer %s: %s", customer_id, e)
            raise StorageError("Could not save message") from e

    def list_by_customer(self, customer_id: int) -> list[Message]:
        try:
            with Session(self._engine) as session:
                return [_as_utc(m) for m in session.exec(
                    select(Message)
                    .where(Message.customer_id == customer_id)
                    .order_by(Message.timestamp, Message.id)  # type: ignore
                ).all()]
        except SQLAlchemyError as e:
            raise StorageError("Could not load conversation") from e

    def list_all(self) -> list[Message]:
        try:
            with Session(self._engine) as session:
                return [_as_utc(m) for m in session.exec(
                    select(Message).order_by(Message.timestamp, Message.id)  # type: ignore
                ).all()]
        except SQLAlchemyError as e:
            raise StorageError("Could not load messages") from e

    def set_read_by_customer(self, customer_id: int) -> int:
        """Flip every unread message of a conversation to read. Returns rows changed."""
        # Single UPDATE so a concurrent insert is either fully included or left unread
        stmt = (
            update(Message)
            .where(Message.customer_id == customer_id)  # type: ignore
            .where(Message.is_read == False)  # noqa: E712
            .values(is_read=True)
        )
        try:
            with self._engine.begin() as conn:
                return conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            logger.error("Failed to mark conversation %s read: %s", customer_id, e)
            raise StorageError("Could not update read state") from e

    def claimed_agent(self, customer_id: int) -> int | None:
        """Agent id on the earliest message of the conversation that names one."""
        try:
            with Session(self._engine) as session:
                return session.exec(
                    select(Message.agent_id)
                    .where(Message.customer_id == customer_id)
                    .where(Message.agent_id != None)  # noqa: E711
                    .order_by(Message.timestamp, Message.id)  # type: ignore
                    .limit(1)
                ).first()
        except SQLAlchemyError as e:
            raise StorageError("Could not load conversation") from e

    def conversation_summaries(self) -> list[ConversationSummary]:
        summaries: dict[int, ConversationSummary] = {}
        for msg in self.list_all():
            # Re-inserting keeps dict order by latest activity
            summary = summaries.pop(msg.customer_id, None)
            if summary is None:
                summary = ConversationSummary(
                    customer_id=msg.customer_id,
                    unread_count=0,
                    message_count=0,
                    last_message_at=msg.timestamp,
                    last_message=msg.content,
                )
            summary.message_count += 1
            if not msg.is_read:
                summary.unread_count += 1
            summary.last_message_at = msg.timestamp
            summary.last_message = msg.content
            summaries[msg.customer_id] = summary
        return list(reversed(summaries.values()))
