import logging
import time
from datetime import datetime, timedelta
from enum import IntEnum
from typing import Callable, Optional, Tuple, Union

from .blink import run_blink
from .config import EndBehavior, RenderOptions
from .render import Renderer
from .signals import CancelToken
from .surface import Surface
from .timecalc import DisplayValue, local_now

log = logging.getLogger(__name__)

TICK = timedelta(seconds=1)


class ExitStatus(IntEnum):
    COMPLETED = 0
    INTERRUPTED = 130


class TimerStrategy:
    name = "timer"
    follows_wall_clock = False

    def __init__(self, target: datetime) -> None:
        self.target = target

    def first_tick(self, now: datetime) -> datetime:
        return now + TICK

    def compute_value(self, now: datetime) -> DisplayValue:
        return DisplayValue.from_duration(self.target - now)

    def is_ended(self, now: datetime) -> bool:
        return now > self.target


class StopwatchStrategy:
    name = "stopwatch"
    follows_wall_clock = False

    def __init__(self, start: datetime, limit: Optional[timedelta] = None) -> None:
        self.start = start
        self.limit = limit

    def first_tick(self, now: datetime) -> datetime:
        return now + TICK

    def compute_value(self, now: datetime) -> DisplayValue:
        elapsed = now - self.start
        if self.limit is not None:
            elapsed = min(elapsed, self.limit)
        return DisplayValue.from_duration(elapsed)

    def is_ended(self, now: datetime) -> bool:
        return self.limit is not None and now - self.start > self.limit


class ClockStrategy:
    name = "clock"
    follows_wall_clock = True

    def first_tick(self, now: datetime) -> datetime:
        # next whole second, so the display flips on second boundaries
        return now.replace(microsecond=0) + TICK

    def compute_value(self, now: datetime) -> DisplayValue:
        # local time of this instant, so a DST change moves the hour
        return DisplayValue.from_clock(now.astimezone())

    def is_ended(self, now: datetime) -> bool:
        return False


Strategy = Union[TimerStrategy, StopwatchStrategy, ClockStrategy]


def select_strategy(options: RenderOptions, now: datetime) -> Strategy:
    if options.count_up:
        limit = None if options.target is None else options.target - now
        return StopwatchStrategy(start=now, limit=limit)
    if options.target is not None:
        return TimerStrategy(options.target)
    return ClockStrategy()


class RunLoop:
    def __init__(
        self,
        surface: Surface,
        renderer: Renderer,
        options: RenderOptions,
        strategy: Strategy,
        cancel: CancelToken,
        clock: Callable[[], datetime] = local_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.surface = surface
        self.renderer = renderer
        self.options = options
        self.strategy = strategy
        self.cancel = cancel
        self.clock = clock
        self.monotonic = monotonic

    def run(self) -> ExitStatus:
        """Paint once, then once per tick until the end or a quit.

        Ticks are scheduled on the monotonic clock; `tick` carries the wall
        time each one stands for.
        """
        now = self.clock()
        started = self.monotonic()
        log.info("%s loop started, end=%s", self.strategy.name, self.options.end_behavior.value)
        self._frame(self.strategy.compute_value(now))

        tick = self.strategy.first_tick(now)
        due = started + (tick - now).total_seconds()
        ended = False
        while True:
            if self._wait_until(due):
                if ended:
                    return ExitStatus.COMPLETED
                return ExitStatus.INTERRUPTED
            if self.strategy.follows_wall_clock:
                tick = self._follow_wall_clock(tick, due)

            if not ended and self.strategy.is_ended(tick):
                ended = True
                log.info("target reached at %s", tick.isoformat())
                if self.options.end_behavior is EndBehavior.IMMEDIATELY:
                    return ExitStatus.COMPLETED
                if self.options.end_behavior is EndBehavior.BLINK:
                    run_blink(self.surface, self.options.color, self.cancel)
                    return ExitStatus.COMPLETED
            self._frame(self.strategy.compute_value(tick))
            tick, due = self._next_tick(tick, due)

    def _frame(self, value: DisplayValue) -> None:
        self.renderer.paint(self.surface, self.options, value)
        self.surface.show()

    def _wait_until(self, due: float) -> bool:
        timeout = max(0.0, due - self.monotonic())
        # a tick and a quit that are both ready resolve to the quit
        return self.cancel.wait(timeout) or self.cancel.cancelled

    def _next_tick(self, tick: datetime, due: float) -> Tuple[datetime, float]:
        tick, due = tick + TICK, due + TICK.total_seconds()
        late = self.monotonic() - due
        if late < 0:
            return tick, due
        skipped = int(late // TICK.total_seconds()) + 1
        log.debug("stalled, skipping %d tick(s)", skipped)
        return tick + skipped * TICK, due + skipped * TICK.total_seconds()

    def _follow_wall_clock(self, tick: datetime, due: float) -> datetime:
        # how far the system clock was stepped since the schedule was set
        stepped = (self.clock() - tick).total_seconds() - (self.monotonic() - due)
        if abs(stepped) < 1.0:
            return tick
        log.info("wall clock stepped by %.1fs", stepped)
        return tick + timedelta(seconds=round(stepped))
