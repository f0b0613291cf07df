"""Local desktop notification adapters.

``DesktopNotifier`` shells out to ``notify-send`` (libnotify) and carries the
navigation target as a string hint. ``ConsoleNotifier`` only logs, for
headless runs.
"""

from __future__ import annotations

import asyncio
import logging
import shutil

from gridwatch.adapters.notification_formatting import format_notification, format_screen_label
from gridwatch.core.models import LocalNotification

LOGGER = logging.getLogger(__name__)

APP_NAME = "gridwatch"


def build_notify_send_args(notification: LocalNotification) -> list[str]:
    args = ["notify-send", "--app-name", APP_NAME, "--urgency", "normal"]
    screen = format_screen_label(notification)
    if screen:
        args.extend(["--hint", f"string:screen:{screen}"])
    if not notification.sound:
        args.extend(["--hint", "boolean:suppress-sound:true"])
    args.append(notification.title)
    if notification.body:
        args.append(notification.body)
    return args


class DesktopNotifier:
    """Notifier adapter backed by notify-send."""

    def __init__(self) -> None:
        if shutil.which("notify-send") is None:
            raise RuntimeError("notify-send not found; install libnotify or use notification_method=console")

    async def schedule(self, notification: LocalNotification) -> None:
        process = await asyncio.create_subprocess_exec(
            *build_notify_send_args(notification),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise RuntimeError(f"notify-send failed ({process.returncode}): {stderr.decode(errors='replace')}")


class ConsoleNotifier:
    """Notifier adapter that writes notifications to the log."""

    async def schedule(self, notification: LocalNotification) -> None:
        LOGGER.info("NOTIFY %s", format_notification(notification, mode="plain").replace("\n", " | "))
