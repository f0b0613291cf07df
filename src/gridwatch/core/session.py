"""Per-user session owning the two sources and the grace window."""

from __future__ import annotations

import logging
from typing import Optional

from gridwatch.core.config import SessionConfig
from gridwatch.core.engine import ReconciliationEngine
from gridwatch.core.grace import GraceWindow
from gridwatch.core.models import Recipient
from gridwatch.core.ports import ChangeFeedPort, QueryPort
from gridwatch.core.preferences import PreferencesStore
from gridwatch.core.sources import PollingSource, RealtimeSource

LOGGER = logging.getLogger(__name__)


class NotificationSession:
    """Starts and supervises both sources for one recipient at a time.

    ``start`` arms the grace window and (re)creates the sources, so changing
    the recipient re-establishes the realtime subscription with new filters.
    """

    def __init__(
        self,
        engine: ReconciliationEngine,
        grace: GraceWindow,
        preferences: PreferencesStore,
        query: QueryPort,
        feed: Optional[ChangeFeedPort],
        config: SessionConfig,
    ) -> None:
        self._engine = engine
        self._grace = grace
        self._preferences = preferences
        self._query = query
        self._feed = feed
        self._config = config
        self._polling: Optional[PollingSource] = None
        self._realtime: Optional[RealtimeSource] = None
        self.recipient: Optional[Recipient] = None

    @property
    def active(self) -> bool:
        return self.recipient is not None

    async def start(self, recipient: Recipient) -> None:
        if self.active:
            await self.stop()

        self.recipient = recipient
        self._grace.arm(self._config.grace_seconds)
        try:
            LOGGER.info("Notification preferences: %s", self._preferences.load())
        except Exception:
            LOGGER.exception("Failed to read notification preferences at session start")

        self._polling = PollingSource(
            self._query,
            recipient,
            self._engine.handle,
            interval=self._config.poll_interval_seconds,
        )
        self._polling.start()
        if self._feed is not None and self._config.realtime_enabled:
            self._realtime = RealtimeSource(self._feed, recipient, self._engine.handle)
            self._realtime.start()
        LOGGER.info(
            "Session started for %s (poll every %ss, realtime=%s)",
            recipient.email,
            self._config.poll_interval_seconds,
            self._realtime is not None,
        )

    async def stop(self) -> None:
        if self._realtime is not None:
            await self._realtime.stop()
            self._realtime = None
        if self._polling is not None:
            await self._polling.stop()
            self._polling = None
        if self.recipient is not None:
            LOGGER.info("Session ended for %s", self.recipient.email)
        self.recipient = None
