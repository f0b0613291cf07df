"""Static configuration for gridwatch.

All user-editable settings (storage, polling, dedup, notifications, logging)
live in a single JSON file for quick edits without touching Python. Secrets
stay in the environment (see ``client.py``).

The config file is looked up in this order: ``GRIDWATCH_CONFIG``, the source
checkout root, then the current working directory. Relative paths inside it
resolve against the directory holding the config file.
"""

import json
import os
from typing import Optional

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def _find_config(project_root: str, cwd: str, override: Optional[str] = None) -> str:
    if override:
        return os.path.abspath(override)
    checkout_config = os.path.join(project_root, "config.json")
    if os.path.exists(checkout_config):
        return checkout_config
    # Installed packages live in site-packages, so fall back to the caller's directory.
    return os.path.join(os.path.abspath(cwd), "config.json")


CONFIG_PATH = _find_config(PROJECT_ROOT, os.getcwd(), os.getenv("GRIDWATCH_CONFIG"))
CONFIG_DIR = os.path.dirname(CONFIG_PATH)


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH} (set GRIDWATCH_CONFIG to point at one)")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def resolve_path(path: str, base: Optional[str] = None) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(base or CONFIG_DIR, path)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# SQLite file backing processed ids, preferences, and delivery history.
_storage = _CONFIG.get("storage", {})
DB_PATH = resolve_path(_storage.get("db_path", "gridwatch.db"))

# Polling is the fallback for realtime outages, so its interval bounds how
# late a missed event can be.
_polling = _CONFIG.get("polling", {})
POLL_INTERVAL_SECONDS = float(_polling.get("interval_seconds", 15))

_realtime = _CONFIG.get("realtime", {})
REALTIME_ENABLED = bool(_realtime.get("enabled", True))

# Own-login security alerts are silenced for this long after sign-in.
_grace = _CONFIG.get("grace_window", {})
GRACE_WINDOW_SECONDS = float(_grace.get("seconds", 15))

# Optional bound on the processed-id history; null keeps every id.
_dedup = _CONFIG.get("dedup", {})
_max_ids = _dedup.get("max_ids")
DEDUP_MAX_IDS = int(_max_ids) if _max_ids is not None else None

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "console")
# Bot chat id is only required when notification_method=bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
