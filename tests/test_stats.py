"""Tests for statistics aggregation."""

import asyncio

from chatmemory.models.conversation import ChatMessage, Conversation, MessageType
from chatmemory.services.chat_session import ChatSession
from chatmemory.services.stats import ChatStats, compute_stats, session_stats
from tests.conftest import FakeProvider

USER, BOT = MessageType.USER, MessageType.BOT


def _seed(store, *conversations):
    async def run():
        for title, pairs in conversations:
            cid = await store.save_conversation(Conversation(title=title))
            await store.save_messages([ChatMessage(text=t, type=k) for t, k in pairs], cid)

    asyncio.run(run())


def test_compute_stats_empty_store(store):
    assert asyncio.run(compute_stats(store)) == ChatStats()


def test_compute_stats_counts_by_type(store):
    _seed(
        store,
        ("first", [("q1", USER), ("a1", BOT), ("q2", USER)]),
        ("second", [("q3", USER), ("a3", BOT)]),
    )

    stats = asyncio.run(compute_stats(store))
    assert stats.to_dict() == {"user": 3, "bot": 2, "total": 5, "conversations": 2}


def test_compute_stats_is_recomputed_each_call(store):
    _seed(store, ("first", [("q1", USER)]))
    assert asyncio.run(compute_stats(store)).total == 1

    _seed(store, ("second", [("q2", USER), ("a2", BOT)]))
    stats = asyncio.run(compute_stats(store))
    assert (stats.total, stats.conversations) == (3, 2)


def test_session_stats_from_snapshot(store):
    session = ChatSession(store, FakeProvider())
    assert session_stats(session.snapshot()) == ChatStats()

    asyncio.run(session.send_message("hi"))
    assert session_stats(session.snapshot()) == ChatStats(user=1, bot=1, total=2, conversations=1)
