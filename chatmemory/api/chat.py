import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from chatmemory.core.database import get_store
from chatmemory.core.errors import StorageError
from chatmemory.services.chat_session import ChatSession
from chatmemory.services.llm import get_llm_provider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    await websocket.accept()
    session = ChatSession(get_store(), get_llm_provider())

    try:
        while True:
            raw = await websocket.receive_text()

            # Check if the client is sending JSON with metadata
            try:
                data = json.loads(raw)
                if not isinstance(data, dict):
                    raise TypeError
            except (json.JSONDecodeError, TypeError):
                data = {"content": raw}

            if data.get("type") == "new":
                session.start_new_conversation()
                await websocket.send_json({"type": "end", "conversation_id": None})
                continue

            try:
                conversation_id = _parse_conversation_id(data.get("conversation_id"))
            except (TypeError, ValueError):
                await websocket.send_json(
                    {"type": "error", "detail": f"Invalid conversation_id: {data['conversation_id']!r}"}
                )
                continue

            try:
                if conversation_id is not None and conversation_id != session.current_conversation_id:
                    if not await session.load_conversation(conversation_id):
                        await websocket.send_json(
                            {"type": "error", "detail": f"Conversation {conversation_id} not found"}
                        )
                        continue

                bot_message = await session.send_message(str(data.get("content", "")))
            except StorageError as e:
                logger.error(f"Chat storage failure: {e}")
                await websocket.send_json({"type": "error", "detail": f"Storage error: {e}"})
                continue

            if bot_message is not None:
                await websocket.send_json({
                    "type": "message",
                    "role": bot_message.type.value,
                    "text": bot_message.text,
                })

            # Send end marker with conversation_id so frontend knows
            await websocket.send_json({"type": "end", "conversation_id": session.current_conversation_id})

    except WebSocketDisconnect:
        logger.debug("Chat websocket disconnected")


def _parse_conversation_id(value) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(value)
    return int(value)
