"""Persisted per-category notification preferences."""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
import logging

from gridwatch.core.ports import KeyValuePort

LOGGER = logging.getLogger(__name__)

SETTINGS_KEY = "notification_settings"

# Stored JSON keys mapped to dataclass fields.
_FIELD_KEYS = {
    "push_enabled": "pushEnabled",
    "budget_alerts": "budgetAlerts",
    "device_status": "deviceStatus",
    "tips_news": "tipsNews",
}


@dataclass(frozen=True)
class SuppressionConfig:
    """User notification preferences. Defaults are all-permissive."""

    push_enabled: bool = True
    budget_alerts: bool = True
    device_status: bool = True
    tips_news: bool = True

    def to_json(self) -> str:
        values = asdict(self)
        return json.dumps({stored: values[name] for name, stored in _FIELD_KEYS.items()})

    @classmethod
    def from_json(cls, raw: str) -> "SuppressionConfig":
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object for preferences, got {type(data).__name__}")
        return cls(**{name: _flag(data, stored) for name, stored in _FIELD_KEYS.items()})


def _flag(data: dict, stored: str) -> bool:
    # Only JSON booleans count; anything else falls back to the permissive default.
    value = data.get(stored, True)
    if isinstance(value, bool):
        return value
    LOGGER.warning("Ignoring non-boolean preference %s=%r; treating it as on", stored, value)
    return True


class PreferencesStore:
    """Load and save SuppressionConfig through a key-value port.

    ``load`` propagates storage and parse errors; callers decide how to fail.
    """

    def __init__(self, kv: KeyValuePort, key: str = SETTINGS_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> SuppressionConfig:
        raw = self._kv.get(self._key)
        if raw is None:
            return SuppressionConfig()
        return SuppressionConfig.from_json(raw)

    def save(self, config: SuppressionConfig) -> None:
        self._kv.set(self._key, config.to_json())
        LOGGER.info("Notification preferences saved: %s", config)
