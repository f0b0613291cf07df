"""Core reconciliation pipeline.

Both sources call ``ReconciliationEngine.handle`` for every candidate. The
pipeline enforces a strict order:
1) Drop malformed candidates (no id or title) without marking them
2) Check-and-set the id against the dedup history
3) Classify and rewrite content
4) Decide visibility from preferences and the grace window
5) Hand the result to the delivery sink

The id is marked before delivery, so a sink failure never causes a retry.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from enum import Enum
import logging

from gridwatch.core.classifier import classify
from gridwatch.core.dedup import DedupStore
from gridwatch.core.grace import GraceWindow
from gridwatch.core.models import Category, ClassifiedCandidate, NotificationCandidate
from gridwatch.core.ports import DeliverySinkPort
from gridwatch.core.preferences import PreferencesStore
from gridwatch.core.suppression import should_suppress

LOGGER = logging.getLogger(__name__)


class Outcome(str, Enum):
    MALFORMED = "malformed"
    DUPLICATE = "duplicate"
    SILENCED = "silenced"
    DELIVERED = "delivered"
    FAILED = "failed"


class ReconciliationEngine:
    """Single entry point shared by the polling and realtime sources."""

    def __init__(
        self,
        dedup: DedupStore,
        preferences: PreferencesStore,
        grace: GraceWindow,
        sink: DeliverySinkPort,
    ) -> None:
        self._dedup = dedup
        self._preferences = preferences
        self._grace = grace
        self._sink = sink
        self._gate = asyncio.Lock()
        self.stats: Counter = Counter()

    async def handle(self, candidate: NotificationCandidate) -> Outcome:
        outcome = await self._process(candidate)
        self.stats[outcome] += 1
        return outcome

    async def _process(self, candidate: NotificationCandidate) -> Outcome:
        if not candidate.id or not candidate.title:
            LOGGER.warning("Dropping malformed candidate id=%r title=%r", candidate.id, candidate.title)
            return Outcome.MALFORMED

        # No await between the membership check and the mark.
        async with self._gate:
            if not self._dedup.claim(candidate.id):
                return Outcome.DUPLICATE

        result = classify(candidate.title, candidate.body)
        classified = ClassifiedCandidate(
            candidate=candidate,
            refined_title=result.title,
            refined_body=result.body,
            category=result.category,
        )

        silent = self._is_suppressed(classified)
        if classified.category is Category.SECURITY and self._grace.is_active():
            LOGGER.info(
                "Grace window active (%.1fs left); silencing security alert %s",
                self._grace.remaining(),
                candidate.id,
            )
            silent = True

        try:
            await self._sink.deliver(
                classified.refined_title,
                classified.refined_body,
                candidate.target_screen,
                silent,
            )
        except Exception:
            LOGGER.exception("Delivery failed for %s; id stays marked", candidate.id)
            return Outcome.FAILED

        LOGGER.info(
            "%s %s (%s) -> %s",
            "Silenced" if silent else "Delivered",
            candidate.id,
            classified.category.value,
            candidate.target_screen,
        )
        return Outcome.SILENCED if silent else Outcome.DELIVERED

    def _is_suppressed(self, classified: ClassifiedCandidate) -> bool:
        # Preferences that cannot be read fail open.
        try:
            config = self._preferences.load()
        except Exception:
            LOGGER.exception("Failed to load notification preferences; not suppressing")
            return False
        return should_suppress(classified, config)
