"""Candidate producers: periodic polling and realtime inserts.

Both sources feed the same engine entry point. Each one is started as an
asyncio task and stopped explicitly when the session ends; nothing is emitted
after ``stop()``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from gridwatch.core.collections import (
    WATCHED_COLLECTIONS,
    Collection,
    candidate_from_row,
    subscriptions_for,
)
from gridwatch.core.models import NotificationCandidate, Recipient
from gridwatch.core.ports import ChangeFeedPort, QueryPort

LOGGER = logging.getLogger(__name__)

Emit = Callable[[NotificationCandidate], Awaitable[object]]

DEFAULT_POLL_INTERVAL = 15.0


class _TaskSource:
    """Shared start/stop lifecycle for task-backed sources."""

    name = "source"

    def __init__(self) -> None:
        self._task: Optional[asyncio.Task] = None
        # Set only by stop(); a direct tick() before start() still emits.
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stopped = False
        self._task = asyncio.create_task(self._run(), name=f"gridwatch-{self.name}")
        return self._task

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        # Waits without absorbing a cancel aimed at the caller.
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            LOGGER.error("%s source failed before stop: %r", self.name, task.exception())
        LOGGER.info("%s source stopped", self.name)

    async def _run(self) -> None:
        raise NotImplementedError


class PollingSource(_TaskSource):
    """Re-queries both collections on a fixed interval.

    The first tick runs immediately so anything missed while offline is
    picked up at session start.
    """

    name = "polling"

    def __init__(
        self,
        query: QueryPort,
        recipient: Recipient,
        emit: Emit,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__()
        self._query = query
        self._recipient = recipient
        self._emit = emit
        self._interval = interval

    async def _run(self) -> None:
        while not self._stopped:
            try:
                await self.tick()
            except Exception:
                LOGGER.exception("Polling tick failed")
            await asyncio.sleep(self._interval)

    async def tick(self) -> int:
        """Run one poll over every collection; return candidates emitted."""

        emitted = 0
        for collection in WATCHED_COLLECTIONS:
            emitted += await self._poll(collection)
        return emitted

    async def _poll(self, collection: Collection) -> int:
        try:
            rows = await self._query.fetch(collection, collection.recipient_value(self._recipient))
        except Exception:
            LOGGER.exception("Polling %s failed; retrying next tick", collection.name)
            return 0

        emitted = 0
        for row in rows:
            if self._stopped:
                break
            await self._emit(candidate_from_row(collection, row, self._recipient))
            emitted += 1
        return emitted


class RealtimeSource(_TaskSource):
    """Emits one candidate per insert event on the watched collections.

    A dropped connection is logged and not re-established here. Polling keeps
    running, so an event missed during an outage (including a silent
    disconnect) is delivered at most one poll interval late.
    """

    name = "realtime"

    def __init__(self, feed: ChangeFeedPort, recipient: Recipient, emit: Emit) -> None:
        super().__init__()
        self._feed = feed
        self._recipient = recipient
        self._emit = emit

    async def _run(self) -> None:
        try:
            await self._feed.listen(subscriptions_for(self._recipient), self._on_insert)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Realtime subscription lost; relying on polling")
            return
        LOGGER.warning("Realtime subscription ended; relying on polling")

    async def _on_insert(self, collection: Collection, record: dict) -> None:
        if self._stopped:
            return
        if not collection.accepts(record):
            LOGGER.debug("Ignoring %s insert outside the watched predicates", collection.name)
            return
        await self._emit(candidate_from_row(collection, record, self._recipient))
