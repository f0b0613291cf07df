"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DedupConfig:
    """Processed-id history settings. ``None`` keeps every id forever."""

    max_ids: Optional[int] = None


@dataclass(frozen=True)
class SessionConfig:
    """Timing and channel settings applied at each session start."""

    poll_interval_seconds: float = 15.0
    grace_seconds: float = 15.0
    realtime_enabled: bool = True
