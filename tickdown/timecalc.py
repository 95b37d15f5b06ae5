import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .errors import ConfigurationError

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_TERM = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_CLOCK_TARGET = re.compile(r"^(\d{1,2}):(\d{2})$")
# largest span a signed 64-bit nanosecond count holds, about 292 years
MAX_DURATION = timedelta(microseconds=(2**63 - 1) // 1000)


@dataclass(frozen=True)
class DisplayValue:
    hours: int
    minutes: int
    seconds: int

    @classmethod
    def from_duration(cls, delta: timedelta) -> "DisplayValue":
        # truncate toward zero, then clamp: nothing negative reaches the screen
        total = max(0, int(delta.total_seconds()))
        return cls(hours=total // 3600, minutes=(total % 3600) // 60, seconds=total % 60)

    @classmethod
    def from_clock(cls, moment: datetime) -> "DisplayValue":
        return cls(hours=moment.hour, minutes=moment.minute, seconds=moment.second)

    def text(self, show_seconds: bool) -> str:
        if show_seconds:
            return f"{self.hours:02d}:{self.minutes % 60:02d}:{self.seconds % 60:02d}"
        return f"{self.hours:02d}:{self.minutes % 60:02d}"

    def symbols(self, show_seconds: bool) -> str:
        parts = [self.hours, self.minutes % 60]
        if show_seconds:
            parts.append(self.seconds % 60)
        return ":".join(f"{n // 10 % 10}{n % 10}" for n in parts)


def parse_duration(text: str) -> timedelta:
    raw = text.strip()
    body = raw
    negative = False
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ConfigurationError(f"invalid duration {text!r}")

    total = 0.0
    pos = 0
    while pos < len(body):
        match = _DURATION_TERM.match(body, pos)
        if match is None:
            raise ConfigurationError(f"invalid duration {text!r}")
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if negative and total > 0:
        raise ConfigurationError(f"duration must not be negative: {text!r}")
    if total > MAX_DURATION.total_seconds():
        raise ConfigurationError(f"duration out of range: {text!r}")
    return timedelta(seconds=total)


def parse_clock_target(text: str, now: datetime) -> datetime:
    match = _CLOCK_TARGET.match(text.strip())
    if match is None:
        raise ConfigurationError(f"invalid target time {text!r}, expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ConfigurationError(f"invalid target time {text!r}, expected HH:MM")
    today = now.astimezone().date()
    target = _local_at(today, hour, minute)
    if target < now:
        target = _local_at(today + timedelta(days=1), hour, minute)
    return target


def _local_at(day: date, hour: int, minute: int) -> datetime:
    # UTC offset of that day, which differs from now's across a DST change
    return datetime.combine(day, time(hour, minute)).astimezone()


def local_now() -> datetime:
    return datetime.now().astimezone()
