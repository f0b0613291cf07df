"""Supabase Realtime change-feed adapter.

Speaks the Phoenix channel protocol over a websocket: join one channel with a
postgres_changes INSERT binding per collection, keep it alive with heartbeats,
and leave the channel when the listener is cancelled.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import Optional, Sequence, Tuple

import websockets

from gridwatch.core.collections import Collection, Subscription
from gridwatch.core.ports import InsertCallback

LOGGER = logging.getLogger(__name__)

HEARTBEAT_SECONDS = 25.0


def build_socket_url(base_url: str, api_key: str) -> str:
    """Return the realtime websocket URL for a project base URL."""

    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}/realtime/v1/websocket?apikey={api_key}&vsn=1.0.0"


def build_join_message(topic: str, subscriptions: Sequence[Subscription], access_token: str, ref: str) -> dict:
    """Return the phx_join message binding INSERT events for each subscription."""

    bindings = [
        {
            "event": "INSERT",
            "schema": "public",
            "table": sub.collection.table,
            "filter": f"{sub.collection.filter_column}=eq.{sub.value}",
        }
        for sub in subscriptions
    ]
    return {
        "topic": topic,
        "event": "phx_join",
        "payload": {
            "config": {
                "broadcast": {"self": False},
                "presence": {"key": ""},
                "postgres_changes": bindings,
            },
            "access_token": access_token,
        },
        "ref": ref,
        "join_ref": ref,
    }


def parse_insert(message: dict) -> Optional[Tuple[str, dict]]:
    """Return (table, record) for a postgres_changes INSERT message, else None."""

    if message.get("event") != "postgres_changes":
        return None
    data = (message.get("payload") or {}).get("data") or {}
    if data.get("type") != "INSERT":
        return None
    record = data.get("record")
    table = data.get("table")
    if not table or not isinstance(record, dict):
        return None
    return table, record


class SupabaseRealtimeFeed:
    """ChangeFeedPort adapter for Supabase Realtime."""

    def __init__(self, base_url: str, api_key: str, access_token: str, channel: str = "gridwatch") -> None:
        self._url = build_socket_url(base_url, api_key)
        self._access_token = access_token
        self._topic = f"realtime:{channel}"
        self._refs = itertools.count(1)

    def _next_ref(self) -> str:
        return str(next(self._refs))

    async def listen(self, subscriptions: Sequence[Subscription], on_insert: InsertCallback) -> None:
        by_table: dict[str, Collection] = {sub.collection.table: sub.collection for sub in subscriptions}
        join_ref = self._next_ref()

        async with websockets.connect(self._url, ping_interval=20, ping_timeout=10, close_timeout=5) as ws:
            await ws.send(json.dumps(build_join_message(self._topic, subscriptions, self._access_token, join_ref)))
            heartbeat = asyncio.create_task(self._heartbeat(ws))
            try:
                async for raw in ws:
                    try:
                        message = json.loads(raw)
                    except json.JSONDecodeError:
                        LOGGER.debug("Skipping non-JSON realtime frame")
                        continue
                    await self._dispatch(message, join_ref, by_table, on_insert)
            finally:
                heartbeat.cancel()
                (outcome,) = await asyncio.gather(heartbeat, return_exceptions=True)
                if isinstance(outcome, Exception):
                    LOGGER.warning("Realtime heartbeat stopped early: %r", outcome)
                await self._leave(ws)

    async def _dispatch(
        self,
        message: dict,
        join_ref: str,
        by_table: dict[str, Collection],
        on_insert: InsertCallback,
    ) -> None:
        event = message.get("event")
        if event == "phx_reply" and message.get("ref") == join_ref:
            status = (message.get("payload") or {}).get("status")
            if status != "ok":
                raise RuntimeError(f"Realtime join rejected: {message.get('payload')!r}")
            LOGGER.info("Realtime subscription joined (%s)", ", ".join(sorted(by_table)))
            return
        if event in ("phx_error", "phx_close") and message.get("topic") == self._topic:
            raise RuntimeError(f"Realtime channel closed by server: {event}")

        parsed = parse_insert(message)
        if parsed is None:
            return
        table, record = parsed
        collection = by_table.get(table)
        if collection is None:
            LOGGER.debug("Ignoring insert on unwatched table %s", table)
            return
        await on_insert(collection, record)

    async def _heartbeat(self, ws) -> None:
        while True:
            await asyncio.sleep(HEARTBEAT_SECONDS)
            await ws.send(
                json.dumps({"topic": "phoenix", "event": "heartbeat", "payload": {}, "ref": self._next_ref()})
            )

    async def _leave(self, ws) -> None:
        message = {"topic": self._topic, "event": "phx_leave", "payload": {}, "ref": self._next_ref()}
        try:
            await ws.send(json.dumps(message))
        except websockets.ConnectionClosed:
            LOGGER.debug("Realtime socket already closed; skipping leave")
