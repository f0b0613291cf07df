"""Delivery sink: records history and schedules local notifications."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional

from gridwatch.core.models import DeliveryRecord, LocalNotification
from gridwatch.core.ports import HistoryPort, NotifierPort

LOGGER = logging.getLogger(__name__)


class LocalNotificationSink:
    """Satisfies DeliverySinkPort on top of a history store and a notifier.

    Silent deliveries are written to history only; they never reach the
    notifier, so no audible or visible alert is produced.
    """

    def __init__(self, history: HistoryPort, notifier: NotifierPort) -> None:
        self._history = history
        self._notifier = notifier

    async def deliver(self, title: str, body: Optional[str], target_screen: str, silent: bool) -> None:
        self._history.save_delivery(
            DeliveryRecord(
                title=title,
                body=body,
                target_screen=target_screen,
                silent=silent,
                delivered_at=datetime.now(timezone.utc),
            )
        )
        if silent:
            LOGGER.debug("Silent delivery recorded: %s", title)
            return
        await self._notifier.schedule(
            LocalNotification(title=title, body=body, sound=True, data={"screen": target_screen})
        )
