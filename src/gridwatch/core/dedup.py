"""Processed-id history (core domain).

The history is kept in memory and mirrored to a single key-value entry as a
JSON array of ids, oldest first. Ids are only removed when an explicit
``max_entries`` bound is configured.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from gridwatch.core.ports import KeyValuePort

LOGGER = logging.getLogger(__name__)

NOTIFIED_IDS_KEY = "notified_ids"


class DedupStore:
    """Persisted set of ids that were delivered or deliberately suppressed.

    If the stored history cannot be read at startup, the store never writes
    over it: each later check or write retries the read and merges what it
    finds, and writes are skipped until a read succeeds. A history that reads
    fine but does not parse is copied to ``<key>.corrupt`` before it is
    replaced.
    """

    def __init__(
        self,
        kv: KeyValuePort,
        key: str = NOTIFIED_IDS_KEY,
        max_entries: Optional[int] = None,
    ) -> None:
        self._kv = kv
        self._key = key
        self._max_entries = max_entries
        # dict keeps insertion order, which the retention bound relies on.
        self._ids: dict[str, None] = {}
        self._unreadable = False
        try:
            self._ids = dict.fromkeys(self._read())
        except Exception:
            LOGGER.exception("Failed to read processed id history; will retry before writing")
            self._unreadable = True

    @property
    def backup_key(self) -> str:
        return f"{self._key}.corrupt"

    def _read(self) -> list[str]:
        """Return stored ids. Storage errors propagate; bad payloads are backed up."""

        raw = self._kv.get(self._key)
        if raw is None:
            return []
        try:
            ids = json.loads(raw)
            if not isinstance(ids, list):
                raise ValueError(f"Expected a JSON array, got {type(ids).__name__}")
        except ValueError:
            LOGGER.exception("Processed id history is corrupt; saving a copy under %s", self.backup_key)
            try:
                self._kv.set(self.backup_key, raw)
            except Exception:
                LOGGER.exception("Failed to back up corrupt processed id history")
            return []
        return [str(item) for item in ids]

    def _recover(self) -> bool:
        """Retry an earlier failed read and merge stored ids ahead of new ones."""

        if not self._unreadable:
            return True
        try:
            stored = self._read()
        except Exception:
            LOGGER.debug("Processed id history still unreadable", exc_info=True)
            return False
        merged = dict.fromkeys(stored)
        merged.update(self._ids)
        self._ids = merged
        self._unreadable = False
        LOGGER.info("Processed id history recovered (%s ids)", len(self._ids))
        return True

    def __len__(self) -> int:
        return len(self._ids)

    def has_processed(self, candidate_id: str) -> bool:
        self._recover()
        return candidate_id in self._ids

    def mark_processed(self, candidate_id: str) -> None:
        """Record an id and persist the history immediately.

        A failed write is logged and swallowed: the in-memory mark holds for
        the rest of the process, but may be lost on restart.
        """

        if self.has_processed(candidate_id):
            return
        self._ids[candidate_id] = None
        self._persist()

    def claim(self, candidate_id: str) -> bool:
        """Check-and-set; return True when the caller is first to see the id."""

        if self.has_processed(candidate_id):
            return False
        self.mark_processed(candidate_id)
        return True

    def _trim(self) -> None:
        if self._max_entries is None or len(self._ids) <= self._max_entries:
            return
        overflow = len(self._ids) - self._max_entries
        for stale in list(self._ids)[:overflow]:
            del self._ids[stale]
        LOGGER.debug("Dedup retention dropped %s oldest ids", overflow)

    def _persist(self) -> None:
        if not self._recover():
            LOGGER.warning(
                "Processed id history unreadable; keeping %s ids in memory without overwriting it",
                len(self._ids),
            )
            return
        self._trim()
        try:
            self._kv.set(self._key, json.dumps(list(self._ids)))
        except Exception:
            LOGGER.exception("Failed to persist processed id history (%s ids)", len(self._ids))
