from __future__ import annotations

from gridwatch.core.grace import GraceWindow


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_inactive_until_armed() -> None:
    window = GraceWindow(clock=FakeClock())
    assert not window.is_active()
    assert window.remaining() == 0.0


def test_active_until_deadline() -> None:
    clock = FakeClock()
    window = GraceWindow(clock=clock)
    window.arm(15)

    clock.now = 10
    assert window.is_active()
    assert window.remaining() == 5

    clock.now = 15
    assert not window.is_active()

    clock.now = 20
    assert not window.is_active()
    assert window.remaining() == 0.0


def test_rearm_starts_a_new_window() -> None:
    clock = FakeClock()
    window = GraceWindow(clock=clock)
    window.arm(15)
    clock.now = 30
    assert not window.is_active()

    window.arm(15)
    clock.now = 40
    assert window.is_active()
