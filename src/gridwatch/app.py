"""Application entry point for the gridwatch notification watcher."""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

from gridwatch import settings
from gridwatch.adapters.desktop_notifier import ConsoleNotifier, DesktopNotifier
from gridwatch.adapters.sqlite_storage import SQLiteStorage
from gridwatch.adapters.telegram_bot_notifier import TelegramBotNotifier
from gridwatch.auth import authorize
from gridwatch.client import build_query_client, build_realtime_feed, load_project
from gridwatch.core.config import DedupConfig, SessionConfig
from gridwatch.core.dedup import DedupStore
from gridwatch.core.delivery import LocalNotificationSink
from gridwatch.core.engine import ReconciliationEngine
from gridwatch.core.grace import GraceWindow
from gridwatch.core.preferences import PreferencesStore
from gridwatch.core.session import NotificationSession

NAME = "GRIDWATCH"
FONT = "tarty-1"

# CLI flag -> SuppressionConfig field.
PREFERENCE_FLAGS = {
    "push": "push_enabled",
    "budget_alerts": "budget_alerts",
    "device_status": "device_status",
    "tips_news": "tips_news",
}


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = settings.resolve_path(file_cfg.get("path", "logs/gridwatch.log"))
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _build_notifier():
    # Select the notification adapter based on configuration to keep the core
    # sink independent from delivery details.
    if settings.NOTIFICATION_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(bot_token=bot_token, chat_id=str(settings.BOT_CHAT_ID))
    if settings.NOTIFICATION_METHOD == "desktop":
        return DesktopNotifier()
    if settings.NOTIFICATION_METHOD == "console":
        return ConsoleNotifier()
    raise RuntimeError("notification_method must be 'bot', 'desktop' or 'console'")


async def _watch(storage: SQLiteStorage, notifier) -> None:
    logger = logging.getLogger(__name__)

    project = load_project()
    user = await authorize(project)

    dedup_config = DedupConfig(max_ids=settings.DEDUP_MAX_IDS)
    dedup = DedupStore(storage, max_entries=dedup_config.max_ids)
    logger.info("%s processed ids loaded", len(dedup))

    preferences = PreferencesStore(storage)
    grace = GraceWindow()
    engine = ReconciliationEngine(
        dedup=dedup,
        preferences=preferences,
        grace=grace,
        sink=LocalNotificationSink(storage, notifier),
    )
    session = NotificationSession(
        engine=engine,
        grace=grace,
        preferences=preferences,
        query=build_query_client(project, user.access_token),
        feed=build_realtime_feed(project, user.access_token),
        config=SessionConfig(
            poll_interval_seconds=settings.POLL_INTERVAL_SECONDS,
            grace_seconds=settings.GRACE_WINDOW_SECONDS,
            realtime_enabled=settings.REALTIME_ENABLED,
        ),
    )

    await session.start(user.recipient)
    try:
        # Sources run as tasks; the watcher lives until interrupted.
        await asyncio.Event().wait()
    finally:
        await session.stop()
        logger.info(
            "Session summary: %s",
            ", ".join(f"{outcome.value}={count}" for outcome, count in engine.stats.items()) or "no events",
        )


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting gridwatch")
    storage = _open_storage()
    notifier = _build_notifier()
    logger.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)

    try:
        asyncio.run(_watch(storage, notifier))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


def _on_off(value: str) -> bool:
    if value not in {"on", "off"}:
        raise argparse.ArgumentTypeError("expected 'on' or 'off'")
    return value == "on"


def _prefs(args: argparse.Namespace) -> None:
    _configure_logging()
    preferences = PreferencesStore(_open_storage())
    config = preferences.load()

    updates = {
        field: getattr(args, flag)
        for flag, field in PREFERENCE_FLAGS.items()
        if getattr(args, flag) is not None
    }
    if updates:
        config = replace(config, **updates)
        preferences.save(config)

    for flag, field in PREFERENCE_FLAGS.items():
        state = "on" if getattr(config, field) else "off"
        print(f"{flag.replace('_', '-'):<14} {state}")


def _history(args: argparse.Namespace) -> None:
    records = _open_storage().list_deliveries(limit=args.limit)
    if not records:
        print("No notifications delivered yet.")
        return

    for record in records:
        timestamp = record.delivered_at.astimezone().strftime("%H:%M:%S %d-%m-%Y")
        marker = "silent" if record.silent else "alert "
        print(f"[{timestamp}] {marker} {record.target_screen:<14} {record.title}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="gridwatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the notification watcher")

    prefs_parser = subparsers.add_parser("prefs", help="Show or change notification preferences")
    for flag in PREFERENCE_FLAGS:
        prefs_parser.add_argument(f"--{flag.replace('_', '-')}", dest=flag, type=_on_off, metavar="on|off")

    history_parser = subparsers.add_parser("history", help="List recently delivered notifications")
    history_parser.add_argument("--limit", type=int, default=20)

    args = parser.parse_args(argv)
    if args.command == "prefs":
        _prefs(args)
        return
    if args.command == "history":
        _history(args)
        return
    _run()


if __name__ == "__main__":
    main()
