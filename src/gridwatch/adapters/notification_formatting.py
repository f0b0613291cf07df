"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from gridwatch.core.models import LocalNotification


def format_screen_label(notification: LocalNotification) -> str:
    """Return the routing target a tap should open, or an empty string."""

    return str(notification.data.get("screen") or "")


def _format_plain(notification: LocalNotification) -> str:
    lines = [notification.title]
    if notification.body:
        lines.append(notification.body)
    screen = format_screen_label(notification)
    if screen:
        lines.append(f"Open: {screen}")
    return "\n".join(lines)


def _format_html(notification: LocalNotification) -> str:
    """Create the HTML body used by the Bot API adapter."""

    parts = [f"<b>{html.escape(notification.title)}</b>"]
    if notification.body:
        parts.extend(["──────────────", html.escape(notification.body)])
    screen = format_screen_label(notification)
    if screen:
        parts.extend(["", f"<i>Open: {html.escape(screen)}</i>"])
    return "\n".join(parts)


def format_notification(notification: LocalNotification, mode: str) -> str:
    """Return the notification formatted for the requested mode."""

    if mode == "plain":
        return _format_plain(notification)
    if mode == "html":
        return _format_html(notification)
    raise ValueError(f"Unsupported notification format: {mode}")
