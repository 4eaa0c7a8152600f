"""REST API for conversation history management."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from chatmemory.api.presentation import message_style
from chatmemory.core.database import get_store
from chatmemory.models.conversation import ChatMessage, Conversation
from chatmemory.services.store import ConversationStore

router = APIRouter()
logger = logging.getLogger(__name__)


def _conversation_summary(c: Conversation) -> dict:
    return {
        "id": c.id,
        "title": c.title,
        "created_at": c.created_at.isoformat(),
        "last_updated_at": c.last_updated_at.isoformat(),
    }


def _message_payload(m: ChatMessage) -> dict:
    return {
        "id": m.id,
        "text": m.text,
        "type": m.type.value,
        "timestamp": m.timestamp.isoformat(),
        "order": m.order,
        "style": message_style(m.type),
    }


@router.get("/")
async def list_conversations(store: ConversationStore = Depends(get_store)):
    conversations = await store.list_conversations()
    return [_conversation_summary(c) for c in conversations]


@router.get("/{conversation_id}")
async def get_conversation(conversation_id: int, store: ConversationStore = Depends(get_store)):
    conv = await store.get_conversation(conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")

    return {
        **_conversation_summary(conv),
        "messages": [_message_payload(m) for m in conv.messages],
    }


@router.delete("/{conversation_id}")
async def delete_conversation(conversation_id: int, store: ConversationStore = Depends(get_store)):
    conv = await store.get_conversation(conversation_id)
    if not conv:
        raise HTTPException(status_code=404, detail="Conversation not found")

    await store.delete_conversation(conv)
    logger.debug(f"Deleted conversation {conversation_id}")
    return {"status": "deleted"}
