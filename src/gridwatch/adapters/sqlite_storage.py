"""SQLite storage adapter.

Implements the core KeyValuePort and HistoryPort using a simple SQLite
database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional

from gridwatch.core.models import DeliveryRecord


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the KeyValuePort and HistoryPort contracts."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - kv: string values by key (processed ids, notification settings)
        - deliveries: append-only log of handled notifications
        """

        with self._connect() as conn:
            # kv mirrors a device key-value store. Values are opaque strings;
            # callers own the serialization.
            # Fields:
            # - key: storage key (PRIMARY KEY)
            # - value: serialized payload
            # - updated_at: last write timestamp
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
                """
            )
            # deliveries is the notification history, silent ones included.
            # Fields:
            # - id: auto-increment primary key
            # - title, body: refined content as delivered
            # - target_screen: navigation target carried in the tap payload
            # - silent: 1 when no visible alert was produced
            # - delivered_at: handling timestamp (UTC)
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS deliveries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    body TEXT,
                    target_screen TEXT NOT NULL,
                    silent INTEGER NOT NULL,
                    delivered_at TIMESTAMP NOT NULL
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for a key, if any."""

        with self._connect() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Upsert a value."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now.isoformat()),
            )

    def save_delivery(self, record: DeliveryRecord) -> None:
        """Append a delivery to the history table."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO deliveries (title, body, target_screen, silent, delivered_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    record.title,
                    record.body,
                    record.target_screen,
                    int(record.silent),
                    record.delivered_at.isoformat(),
                ),
            )

    def list_deliveries(self, limit: int = 20) -> list[DeliveryRecord]:
        """Return the most recent deliveries, newest first."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT title, body, target_screen, silent, delivered_at
                FROM deliveries
                ORDER BY id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        return [
            DeliveryRecord(
                title=row["title"],
                body=row["body"],
                target_screen=row["target_screen"],
                silent=bool(row["silent"]),
                delivered_at=datetime.fromisoformat(row["delivered_at"]),
            )
            for row in rows
        ]
