"""Durable storage for conversations and their ordered messages.

Every public method is a coroutine. The SQLModel work itself is blocking, so it
runs in a worker thread via ``asyncio.to_thread``; calls are not parallelised
beyond that. Write paths run inside a single transaction each, so a failure
part way through ``save_messages`` or ``delete_conversation`` leaves the
previously committed rows untouched.
"""

import asyncio
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, SQLModel, select

from chatmemory.core.errors import ConversationNotFound, StorageError, StorageUnavailable
from chatmemory.models.conversation import ChatMessage, Conversation, default_title

logger = logging.getLogger(__name__)


class ConversationStore:
    def __init__(self, engine: Engine):
        self._engine = engine
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the schema once. Concurrent callers wait for the first run."""
        async with self._init_lock:
            if self._initialized:
                return
            try:
                await asyncio.to_thread(self._create_schema)
            except SQLAlchemyError as e:
                logger.error(f"Schema creation failed: {e}")
                raise StorageUnavailable(f"Could not initialise storage: {e}") from e
            self._initialized = True
            logger.debug("Storage initialised")

    def _create_schema(self) -> None:
        SQLModel.metadata.create_all(
            self._engine,
            tables=[Conversation.__table__, ChatMessage.__table__],  # type: ignore[list-item]
        )

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with Session(self._engine, expire_on_commit=False) as session:
            try:
                yield session
                session.commit()
            except SQLAlchemyError as e:
                session.rollback()
                raise StorageError(str(e)) from e

    # Conversations

    async def list_conversations(self) -> list[Conversation]:
        """All conversations, most recently updated first. Messages are not loaded."""
        await self.initialize()
        return await asyncio.to_thread(self._list_conversations)

    def _list_conversations(self) -> list[Conversation]:
        with self._transaction() as session:
            return list(
                session.exec(
                    select(Conversation).order_by(Conversation.last_updated_at.desc())  # type: ignore
                ).all()
            )

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        """Return the conversation with its messages in order, or None if absent."""
        await self.initialize()
        return await asyncio.to_thread(self._get_conversation, conversation_id)

    def _get_conversation(self, conversation_id: int) -> Conversation | None:
        with self._transaction() as session:
            conv = session.exec(
                select(Conversation)
                .where(Conversation.id == conversation_id)
                .options(selectinload(Conversation.messages))  # type: ignore[arg-type]
            ).first()
            if not conv:
                logger.debug(f"Conversation {conversation_id} not found")
            return conv

    async def save_conversation(self, conversation: Conversation) -> int:
        """Insert a new conversation or update an existing one.

        The resolved id is written back onto ``conversation`` and returned.
        Updates refresh ``last_updated_at``; inserts keep the timestamps the
        record was created with.
        """
        await self.initialize()
        return await asyncio.to_thread(self._save_conversation, conversation)

    def _save_conversation(self, conversation: Conversation) -> int:
        with self._transaction() as session:
            if conversation.id is None:
                if not conversation.title:
                    conversation.title = default_title(conversation.created_at)
                session.add(conversation)
                session.flush()
                logger.debug(f"Created conversation {conversation.id}")
                return conversation.id  # type: ignore[return-value]

            existing = session.get(Conversation, conversation.id)
            if not existing:
                raise ConversationNotFound(conversation.id)
            existing.title = conversation.title or existing.title
            existing.last_updated_at = datetime.now(timezone.utc)
            session.add(existing)
            conversation.last_updated_at = existing.last_updated_at
            logger.debug(f"Updated conversation {conversation.id}")
            return conversation.id

    async def delete_conversation(self, conversation: Conversation) -> int:
        """Delete a conversation and all of its messages. Returns rows removed."""
        await self.initialize()
        return await asyncio.to_thread(self._delete_conversation, conversation.id)

    def _delete_conversation(self, conversation_id: int | None) -> int:
        if conversation_id is None:
            return 0
        with self._transaction() as session:
            messages = session.exec(
                select(ChatMessage).where(ChatMessage.conversation_id == conversation_id)
            ).all()
            for msg in messages:
                session.delete(msg)
            session.flush()

            conv = session.get(Conversation, conversation_id)
            if not conv:
                logger.debug(f"Delete: conversation {conversation_id} not found")
                return 0
            session.delete(conv)
            logger.debug(f"Deleted conversation {conversation_id} ({len(messages)} messages)")
            return 1

    # Messages

    async def get_messages(self, conversation_id: int) -> list[ChatMessage]:
        await self.initialize()
        return await asyncio.to_thread(self._get_messages, conversation_id)

    def _get_messages(self, conversation_id: int) -> list[ChatMessage]:
        with self._transaction() as session:
            return list(
                session.exec(
                    select(ChatMessage)
                    .where(ChatMessage.conversation_id == conversation_id)
                    .order_by(ChatMessage.order)  # type: ignore
                ).all()
            )

    async def save_message(self, message: ChatMessage, conversation_id: int) -> None:
        await self.initialize()
        await asyncio.to_thread(self._save_message, message, conversation_id)

    def _save_message(self, message: ChatMessage, conversation_id: int) -> None:
        with self._transaction() as session:
            message.conversation_id = conversation_id
            _upsert(session, message)

    async def save_messages(self, messages: list[ChatMessage], conversation_id: int) -> None:
        """Persist ``messages`` under ``conversation_id`` in list order.

        ``order`` is reassigned from each message's position in the list, so
        the stored sequence always matches the caller's current view.
        """
        await self.initialize()
        await asyncio.to_thread(self._save_messages, messages, conversation_id)

    def _save_messages(self, messages: list[ChatMessage], conversation_id: int) -> None:
        with self._transaction() as session:
            for index, message in enumerate(messages):
                message.conversation_id = conversation_id
                message.order = index
                _upsert(session, message)
            session.flush()
        logger.debug(f"Saved {len(messages)} messages for conversation {conversation_id}")


def _upsert(session: Session, message: ChatMessage) -> None:
    if message.id is None:
        session.add(message)
    else:
        session.merge(message)
