from __future__ import annotations

import asyncio
from typing import Optional

from gridwatch.core.collections import INVITATIONS
from gridwatch.core.config import SessionConfig
from gridwatch.core.dedup import DedupStore
from gridwatch.core.engine import ReconciliationEngine
from gridwatch.core.grace import GraceWindow
from gridwatch.core.models import Recipient
from gridwatch.core.preferences import PreferencesStore
from gridwatch.core.session import NotificationSession


class FakeKeyValue:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FakeQuery:
    def __init__(self) -> None:
        self.rows = {"invitations": [{"id": "inv-1", "title": "New Invitation", "body": "You have a pending invite"}]}
        self.calls: list[tuple[str, str]] = []

    async def fetch(self, collection, value):
        self.calls.append((collection.name, value))
        return list(self.rows.get(collection.name, []))


class FakeFeed:
    def __init__(self) -> None:
        self.listens: list[list] = []
        self.on_insert = None
        self.active = 0

    async def listen(self, subscriptions, on_insert) -> None:
        self.listens.append([(s.collection.name, s.value) for s in subscriptions])
        self.on_insert = on_insert
        self.active += 1
        try:
            await asyncio.Event().wait()
        finally:
            self.active -= 1


class FakeSink:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def deliver(self, title, body, target_screen, silent) -> None:
        self.calls.append((title, body, target_screen, silent))


def _session(realtime_enabled: bool = True):
    kv = FakeKeyValue()
    grace = GraceWindow()
    preferences = PreferencesStore(kv)
    sink = FakeSink()
    engine = ReconciliationEngine(DedupStore(kv), preferences, grace, sink)
    query = FakeQuery()
    feed = FakeFeed()
    session = NotificationSession(
        engine=engine,
        grace=grace,
        preferences=preferences,
        query=query,
        feed=feed,
        config=SessionConfig(poll_interval_seconds=0.01, grace_seconds=15, realtime_enabled=realtime_enabled),
    )
    return session, grace, query, feed, sink


ALICE = Recipient(user_id="u-alice", email="alice@example.com")
BOB = Recipient(user_id="u-bob", email="bob@example.com")


def test_start_arms_grace_window_and_both_sources() -> None:
    session, grace, query, feed, sink = _session()

    async def scenario():
        await session.start(ALICE)
        await asyncio.sleep(0.03)
        # The same row also arrives through realtime.
        await feed.on_insert(
            INVITATIONS,
            {"id": "inv-1", "title": "New Invitation", "body": "You have a pending invite", "status": "pending"},
        )
        assert grace.is_active()
        assert feed.active == 1
        await session.stop()

    asyncio.run(scenario())

    assert sink.calls == [("New Invitation", "You have a pending invite", "Invitations", False)]
    assert feed.active == 0
    assert not session.active


def test_switching_recipient_resubscribes_with_new_filters() -> None:
    session, _, query, feed, _ = _session()

    async def scenario():
        await session.start(ALICE)
        await asyncio.sleep(0.01)
        await session.start(BOB)
        await asyncio.sleep(0.01)
        await session.stop()

    asyncio.run(scenario())

    assert feed.listens == [
        [("invitations", "alice@example.com"), ("notifications", "u-alice")],
        [("invitations", "bob@example.com"), ("notifications", "u-bob")],
    ]
    assert ("invitations", "bob@example.com") in query.calls
    assert feed.active == 0


def test_realtime_can_be_disabled() -> None:
    session, _, query, feed, _ = _session(realtime_enabled=False)

    async def scenario():
        await session.start(ALICE)
        await asyncio.sleep(0.01)
        await session.stop()

    asyncio.run(scenario())

    assert feed.listens == []
    assert query.calls


def test_no_polling_after_stop() -> None:
    session, _, query, _, _ = _session()

    async def scenario():
        await session.start(ALICE)
        await asyncio.sleep(0.02)
        await session.stop()
        calls = len(query.calls)
        await asyncio.sleep(0.03)
        return calls

    calls = asyncio.run(scenario())
    assert len(query.calls) == calls
