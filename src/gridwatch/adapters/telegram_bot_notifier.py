"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so alerts can be routed to a phone via a bot chat.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from gridwatch.adapters.notification_formatting import format_notification
from gridwatch.core.models import LocalNotification


class TelegramBotNotifier:
    """Notifier adapter that sends notifications via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def build_payload(self, notification: LocalNotification) -> dict:
        return {
            "chat_id": self._chat_id,
            "text": format_notification(notification, mode="html"),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
            "disable_notification": not notification.sound,
        }

    async def schedule(self, notification: LocalNotification) -> None:
        """Send the formatted notification via the Bot API."""

        await asyncio.to_thread(self._send_sync, self.build_payload(notification))

    def _send_sync(self, payload: dict) -> None:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e
