from fastapi import APIRouter, Depends

from chatmemory.core.database import get_store
from chatmemory.services.stats import compute_stats
from chatmemory.services.store import ConversationStore

router = APIRouter()


@router.get("/")
async def get_stats(store: ConversationStore = Depends(get_store)):
    stats = await compute_stats(store)
    return stats.to_dict()
