from sqlmodel import create_engine

from chatmemory.core.config import settings
from chatmemory.services.store import ConversationStore

engine = create_engine(
    f"sqlite:///{settings.db_path}",
    echo=settings.debug,
    connect_args={"check_same_thread": False},
)

_store: ConversationStore | None = None


def get_store() -> ConversationStore:
    """Return the process-wide store bound to the configured engine."""
    global _store
    if _store is None:
        _store = ConversationStore(engine)
    return _store
