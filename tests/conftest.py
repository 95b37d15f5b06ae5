"""
Shared fixtures for tickdown tests.

Run loops never sleep here: ScriptedCancel stands in for CancelToken and moves
a FakeClock forward by whatever timeout the loop asks to wait for. The process
time zone is pinned to UTC for every test; `local_zone` switches it.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from tickdown.config import RenderOptions
from tickdown.glyphs import build_glyph_table
from tickdown.render import Renderer
from tickdown.surface import MemorySurface

# POSIX rule for Europe/Berlin, so no tz database is needed
BERLIN = "CET-1CEST,M3.5.0,M10.5.0/3"

EPOCH = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable wall clock that only moves when told to.

    `monotonic` follows `advance` but not `jump`, which models the system
    clock being stepped.
    """

    def __init__(self, now: datetime = EPOCH) -> None:
        self.now = now
        self.elapsed = 0.0

    def __call__(self) -> datetime:
        return self.now

    def monotonic(self) -> float:
        return self.elapsed

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)
        self.elapsed += seconds

    def jump(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class ScriptedCancel:
    """CancelToken double: waits advance the clock, optionally cancelling on the Nth wait."""

    def __init__(self, clock: FakeClock, cancel_on_wait: Optional[int] = None, max_waits: int = 10_000) -> None:
        self.clock = clock
        self.cancel_on_wait = cancel_on_wait
        self.max_waits = max_waits
        self.waits: List[float] = []
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: str = "") -> bool:
        first = not self._cancelled
        self._cancelled = True
        return first

    def wait(self, timeout: Optional[float] = None) -> bool:
        if self._cancelled:
            return True
        self.waits.append(timeout)
        if len(self.waits) > self.max_waits:
            raise AssertionError("loop never finished")
        if self.cancel_on_wait is not None and len(self.waits) >= self.cancel_on_wait:
            self._cancelled = True
            return True
        self.clock.advance(timeout or 0.0)
        return False


@pytest.fixture(autouse=True)
def local_zone(monkeypatch):
    def use(zone: str) -> None:
        if not hasattr(time, "tzset"):
            pytest.skip("time.tzset is unavailable")
        monkeypatch.setenv("TZ", zone)
        time.tzset()

    if hasattr(time, "tzset"):
        use("UTC0")
    yield use
    monkeypatch.undo()
    if hasattr(time, "tzset"):
        time.tzset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def glyphs():
    return build_glyph_table()


@pytest.fixture
def renderer(glyphs) -> Renderer:
    return Renderer(glyphs)


@pytest.fixture
def surface() -> MemorySurface:
    return MemorySurface(80, 24)


@pytest.fixture
def options() -> RenderOptions:
    return RenderOptions(show_seconds=True)
