"""Conversation and message models for chat history persistence."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, Relationship, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_title(created_at: datetime) -> str:
    return f"Conversation {created_at:%Y-%m-%d %H:%M}"


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, always returns aware UTC. SQLite keeps no offset."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class MessageType(str, Enum):
    USER = "user"
    BOT = "bot"


class Conversation(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(default="")
    created_at: datetime = Field(default_factory=_utcnow, sa_type=UTCDateTime)
    last_updated_at: datetime = Field(default_factory=_utcnow, sa_type=UTCDateTime, index=True)

    # Read-only and never lazy loaded; ConversationStore.get_conversation loads it
    # explicitly and messages are written through ConversationStore.save_messages
    messages: list["ChatMessage"] = Relationship(
        sa_relationship_kwargs={
            "order_by": "ChatMessage.order",
            "lazy": "raise",
            "viewonly": True,
        }
    )


class ChatMessage(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    conversation_id: Optional[int] = Field(default=None, foreign_key="conversation.id", index=True)
    text: str
    type: MessageType
    timestamp: datetime = Field(default_factory=_utcnow, sa_type=UTCDateTime)
    order: int = Field(default=0)
