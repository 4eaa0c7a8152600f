"""Message and conversation counts.

``compute_stats`` rescans the whole store on every call. That is fine for a
personal chat history; a large corpus would need counters maintained on write.
"""

from dataclasses import asdict, dataclass

from chatmemory.models.conversation import MessageType
from chatmemory.services.chat_session import SessionSnapshot
from chatmemory.services.store import ConversationStore


@dataclass
class ChatStats:
    user: int = 0
    bot: int = 0
    total: int = 0
    conversations: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


async def compute_stats(store: ConversationStore) -> ChatStats:
    conversations = await store.list_conversations()
    stats = ChatStats(conversations=len(conversations))

    for conv in conversations:
        messages = await store.get_messages(conv.id)  # type: ignore[arg-type]
        stats.user += sum(1 for m in messages if m.type == MessageType.USER)
        stats.bot += sum(1 for m in messages if m.type == MessageType.BOT)

    stats.total = stats.user + stats.bot
    return stats


def session_stats(snapshot: SessionSnapshot) -> ChatStats:
    """Stats for a single live session, counting it as one conversation."""
    return ChatStats(
        user=snapshot.user_count,
        bot=snapshot.bot_count,
        total=snapshot.message_count,
        conversations=1 if snapshot.message_count else 0,
    )
