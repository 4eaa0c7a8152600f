"""In-memory controller for the conversation currently being viewed.

A ``ChatSession`` owns two lists that always move together:

* ``displayed_messages`` - the ``ChatMessage`` rows shown to the user
* ``model_context`` - the role/content window sent to the LLM, which is the
  displayed history prefixed by a single system instruction

Every exchange is persisted through the store once the reply has arrived.
A session is driven by one caller at a time; operations attempted while a
reply is pending raise ``SessionBusy``.
"""

import logging
from dataclasses import dataclass

from chatmemory.core.config import settings
from chatmemory.core.errors import ConversationNotFound, SessionBusy
from chatmemory.models.conversation import ChatMessage, Conversation, MessageType
from chatmemory.services.llm.base import BaseLLMProvider, Message
from chatmemory.services.store import ConversationStore

logger = logging.getLogger(__name__)

_ROLES = {
    MessageType.USER: "user",
    MessageType.BOT: "assistant",
}


def context_entry(message: ChatMessage) -> Message:
    """Project a stored message onto the model-context window."""
    return Message(role=_ROLES[message.type], content=message.text)


@dataclass(frozen=True)
class SessionSnapshot:
    conversation_id: int | None
    message_count: int
    user_count: int
    bot_count: int
    is_awaiting_response: bool


class ChatSession:
    def __init__(
        self,
        store: ConversationStore,
        gateway: BaseLLMProvider,
        system_prompt: str | None = None,
        title_max_length: int | None = None,
    ):
        self.store = store
        self.gateway = gateway
        self.system_prompt = system_prompt or settings.system_prompt
        self.title_max_length = title_max_length or settings.title_max_length

        self.displayed_messages: list[ChatMessage] = []
        self.model_context: list[Message] = [self._system_entry()]
        self.pending_input = ""
        self.is_awaiting_response = False
        self.last_message: ChatMessage | None = None
        self._conversation: Conversation | None = None

    @property
    def current_conversation_id(self) -> int | None:
        return self._conversation.id if self._conversation else None

    def _system_entry(self) -> Message:
        return Message(role="system", content=self.system_prompt)

    def _ensure_idle(self, action: str) -> None:
        if self.is_awaiting_response:
            raise SessionBusy(f"Cannot {action} while awaiting a response")

    def _reset_lists(self) -> None:
        self.displayed_messages.clear()
        self.model_context.clear()
        self.model_context.append(self._system_entry())

    def _append(self, message: ChatMessage) -> None:
        self.displayed_messages.append(message)
        self.model_context.append(context_entry(message))
        self.last_message = message

    async def load_conversation(self, conversation_id: int) -> bool:
        """Replace the session contents with a stored conversation.

        Returns False and leaves the session untouched if the id is unknown.
        """
        self._ensure_idle("load a conversation")
        conversation = await self.store.get_conversation(conversation_id)
        if not conversation:
            return False

        self._reset_lists()
        for message in conversation.messages:
            self._append(message)
        self.last_message = self.displayed_messages[-1] if self.displayed_messages else None
        self._conversation = conversation
        logger.debug(f"Loaded conversation {conversation_id} ({len(self.displayed_messages)} messages)")
        return True

    def start_new_conversation(self) -> None:
        self._ensure_idle("start a new conversation")
        self._reset_lists()
        self.pending_input = ""
        self.is_awaiting_response = False
        self.last_message = None
        self._conversation = None

    async def send_message(self, text: str | None = None) -> ChatMessage | None:
        """Send a user turn, append the reply and persist the conversation.

        Uses ``pending_input`` when ``text`` is omitted. Blank input is ignored
        and returns None; otherwise the bot message is returned. Gateway errors
        arrive as ordinary reply text.
        """
        self._ensure_idle("send a message")
        user_text = (self.pending_input if text is None else text).strip()
        if not user_text:
            return None

        self._append(ChatMessage(text=user_text, type=MessageType.USER))
        self.pending_input = ""

        self.is_awaiting_response = True
        try:
            response = await self.gateway.complete(list(self.model_context))
        finally:
            self.is_awaiting_response = False

        bot_message = ChatMessage(text=response, type=MessageType.BOT)
        self._append(bot_message)

        await self.save_conversation()
        return bot_message

    async def save_conversation(self) -> int | None:
        """Persist the conversation and its messages. Returns the conversation id."""
        if not self.displayed_messages:
            return None

        if self._conversation is None:
            self._conversation = Conversation(title=self._derive_title())

        try:
            conversation_id = await self.store.save_conversation(self._conversation)
        except ConversationNotFound:
            logger.warning(
                f"Conversation {self._conversation.id} no longer exists, saving as a new conversation"
            )
            self._conversation = Conversation(title=self._conversation.title)
            conversation_id = await self.store.save_conversation(self._conversation)

        await self.store.save_messages(self.displayed_messages, conversation_id)
        logger.debug(f"Saved conversation {conversation_id} ({len(self.displayed_messages)} messages)")
        return conversation_id

    def _derive_title(self) -> str:
        return self.displayed_messages[0].text[: self.title_max_length]

    def snapshot(self) -> SessionSnapshot:
        user_count = sum(1 for m in self.displayed_messages if m.type == MessageType.USER)
        return SessionSnapshot(
            conversation_id=self.current_conversation_id,
            message_count=len(self.displayed_messages),
            user_count=user_count,
            bot_count=len(self.displayed_messages) - user_count,
            is_awaiting_response=self.is_awaiting_response,
        )
