"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage, backend, and notification
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Optional, Protocol, Sequence

from gridwatch.core.collections import Collection, Subscription
from gridwatch.core.models import DeliveryRecord, LocalNotification

InsertCallback = Callable[[Collection, dict], Awaitable[None]]


class KeyValuePort(Protocol):
    """String key-value persistence shared by dedup history and preferences."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class HistoryPort(Protocol):
    """Delivery history written by the sink for every handled notification."""

    def save_delivery(self, record: DeliveryRecord) -> None:
        ...


class QueryPort(Protocol):
    """Predicate-scoped read against one logical collection."""

    async def fetch(self, collection: Collection, value: str) -> list[dict]:
        ...


class ChangeFeedPort(Protocol):
    """Insert-event subscription on logical collections.

    ``listen`` runs until cancelled; cancellation must unsubscribe.
    """

    async def listen(self, subscriptions: Sequence[Subscription], on_insert: InsertCallback) -> None:
        ...


class NotifierPort(Protocol):
    """Schedules an immediate, visible local notification."""

    async def schedule(self, notification: LocalNotification) -> None:
        ...


class DeliverySinkPort(Protocol):
    """Delivery contract consumed by the reconciliation engine."""

    async def deliver(self, title: str, body: Optional[str], target_screen: str, silent: bool) -> None:
        ...
