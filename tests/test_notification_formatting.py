from __future__ import annotations

import pytest

from gridwatch.adapters.desktop_notifier import build_notify_send_args
from gridwatch.adapters.notification_formatting import format_notification
from gridwatch.adapters.telegram_bot_notifier import TelegramBotNotifier
from gridwatch.core.models import LocalNotification


def _notification(body: "str | None" = "Budget <limit> exceeded", sound: bool = True) -> LocalNotification:
    return LocalNotification(title="Budget Alert", body=body, sound=sound, data={"screen": "Notifications"})


def test_html_escapes_and_carries_screen() -> None:
    text = format_notification(_notification(), mode="html")
    assert text.startswith("<b>Budget Alert</b>")
    assert "Budget &lt;limit&gt; exceeded" in text
    assert "Open: Notifications" in text


def test_plain_skips_missing_body() -> None:
    text = format_notification(_notification(body=None), mode="plain")
    assert text == "Budget Alert\nOpen: Notifications"


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        format_notification(_notification(), mode="markdown")


def test_bot_payload_maps_sound_to_disable_notification() -> None:
    notifier = TelegramBotNotifier(bot_token="token", chat_id="42")
    payload = notifier.build_payload(_notification(sound=False))
    assert payload["chat_id"] == "42"
    assert payload["parse_mode"] == "HTML"
    assert payload["disable_notification"] is True


def test_notify_send_args_include_screen_hint() -> None:
    args = build_notify_send_args(_notification())
    assert args[0] == "notify-send"
    assert "string:screen:Notifications" in args
    assert args[-2:] == ["Budget Alert", "Budget <limit> exceeded"]
