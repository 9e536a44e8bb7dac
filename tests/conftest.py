from __future__ import annotations

import os
from typing import Callable

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


class FakeTimer:
    def __init__(self, interval_ms: int, callback: Callable[[], None]):
        self.interval_ms = interval_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records armed timers; tests fire them by hand."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def schedule(self, interval_ms: int, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval_ms, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for timer in self.active:
                timer.callback()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
