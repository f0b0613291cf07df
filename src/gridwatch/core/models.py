"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any backend-specific row or payload types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Category(str, Enum):
    SECURITY = "security"
    INVITE_ACCEPTED = "invite-accepted"
    INVITE_DECLINED = "invite-declined"
    GENERIC = "generic"


@dataclass(frozen=True)
class Recipient:
    """Identity of the signed-in user that scopes every query."""

    user_id: str
    email: str


@dataclass(frozen=True)
class NotificationCandidate:
    """A raw event observed by either source, not yet deduplicated."""

    id: Optional[str]
    title: Optional[str]
    body: Optional[str]
    target_screen: str
    recipient_key: str
    created_at: Optional[str] = None


@dataclass(frozen=True)
class ClassifiedCandidate:
    """Candidate plus the refined content chosen by the classifier."""

    candidate: NotificationCandidate
    refined_title: str
    refined_body: Optional[str]
    category: Category


@dataclass(frozen=True)
class LocalNotification:
    """Payload handed to a notifier for an immediate local alert.

    ``data`` carries the routing metadata read back on tap, e.g.
    ``{"screen": "Invitations"}``.
    """

    title: str
    body: Optional[str]
    sound: bool
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryRecord:
    """Persisted history entry for one delivery, silent or not."""

    title: str
    body: Optional[str]
    target_screen: str
    silent: bool
    delivered_at: datetime
