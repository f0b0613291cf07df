"""Logical event collections watched by both sources.

Polling and realtime read the same two collections with the same recipient
predicates, so both channels build candidates through ``candidate_from_row``
and end up with identical ids for the same underlying row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from gridwatch.core.models import NotificationCandidate, Recipient


@dataclass(frozen=True)
class Collection:
    """One logical collection and the predicates that scope it to a recipient."""

    name: str
    table: str
    # Recipient attribute ("email" or "user_id") compared against filter_column.
    recipient_attr: str
    filter_column: str
    # Extra equality predicates, kept as lowercase strings for comparison.
    extra_filters: Tuple[Tuple[str, str], ...]
    target_screen: str

    def recipient_value(self, recipient: Recipient) -> str:
        return getattr(recipient, self.recipient_attr)

    def accepts(self, row: dict) -> bool:
        """Return True when a row satisfies the extra predicates.

        Realtime filters only support the recipient column server-side, so the
        remaining predicates are checked here.
        """

        for column, expected in self.extra_filters:
            if str(row.get(column)).lower() != expected:
                return False
        return True


@dataclass(frozen=True)
class Subscription:
    """A collection bound to the recipient value it is filtered by."""

    collection: Collection
    value: str


INVITATIONS = Collection(
    name="invitations",
    table="invitations",
    recipient_attr="email",
    filter_column="invitee_email",
    extra_filters=(("status", "pending"),),
    target_screen="Invitations",
)

NOTIFICATIONS = Collection(
    name="notifications",
    table="notifications",
    recipient_attr="user_id",
    filter_column="user_id",
    extra_filters=(("is_read", "false"),),
    target_screen="Notifications",
)

WATCHED_COLLECTIONS: Tuple[Collection, ...] = (INVITATIONS, NOTIFICATIONS)


def subscriptions_for(recipient: Recipient) -> list[Subscription]:
    return [
        Subscription(collection=collection, value=collection.recipient_value(recipient))
        for collection in WATCHED_COLLECTIONS
    ]


def candidate_from_row(collection: Collection, row: dict, recipient: Recipient) -> NotificationCandidate:
    """Map a backend row to a candidate with a channel-independent id."""

    row_id = row.get("id")
    candidate_id = f"{collection.name}:{row_id}" if row_id not in (None, "") else None
    return NotificationCandidate(
        id=candidate_id,
        title=row.get("title"),
        body=row.get("body"),
        target_screen=collection.target_screen,
        recipient_key=collection.recipient_value(recipient),
        created_at=row.get("created_at"),
    )
