"""Self-action grace window.

A fresh sign-in triggers a "new login" security event for the user's own
action. For a short window after session start such events are delivered
silently.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

DEFAULT_GRACE_SECONDS = 15.0


class GraceWindow:
    """Single-deadline window armed once per session start.

    The deadline is never extended by incoming events.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._deadline: Optional[float] = None

    def arm(self, duration_seconds: float = DEFAULT_GRACE_SECONDS) -> None:
        self._deadline = self._clock() + duration_seconds

    def is_active(self) -> bool:
        return self._deadline is not None and self._clock() < self._deadline

    def remaining(self) -> float:
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._clock())
