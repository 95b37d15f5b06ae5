import json
import logging
import os
import platform
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Optional

from .errors import ConfigurationError

log = logging.getLogger(__name__)

# curses colour numbers, fixed by the terminfo standard
COLORS = MappingProxyType(
    {
        "black": 0,
        "red": 1,
        "green": 2,
        "yellow": 3,
        "blue": 4,
        "magenta": 5,
        "cyan": 6,
        "white": 7,
    }
)
DEFAULT_COLOR = "blue"


class EndBehavior(Enum):
    IMMEDIATELY = "immediately"
    BLINK = "blink"
    FREEZE = "freeze"


@dataclass(frozen=True)
class RenderOptions:
    show_seconds: bool = False
    end_behavior: EndBehavior = EndBehavior.IMMEDIATELY
    target: Optional[datetime] = None
    count_up: bool = False
    color: int = COLORS[DEFAULT_COLOR]


def _config_home() -> Path:
    system = platform.system().lower()
    if system == "darwin":
        return Path.home() / "Library" / "Application Support"
    if system == "windows" and os.environ.get("APPDATA"):
        return Path(os.environ["APPDATA"])
    if system == "windows":
        return Path.home() / "AppData" / "Roaming"
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def get_config_path() -> Path:
    override = os.environ.get("TICKDOWN_CONFIG")
    if override:
        return Path(override)
    return _config_home() / "tickdown" / "config.json"


def load_config() -> Dict[str, Any]:
    """Read the JSON settings file; a missing or unusable file means defaults."""
    path = get_config_path()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        log.warning("ignoring config %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        log.warning("ignoring config %s: expected a JSON object, got %s", path, type(data).__name__)
        return {}
    log.debug("loaded config %s", path)
    return data


def get_color_name(config: Dict[str, Any]) -> Optional[str]:
    color = config.get("color")
    if isinstance(color, str) and color:
        return color
    return None


def get_show_seconds(config: Dict[str, Any]) -> Optional[bool]:
    show = config.get("show_seconds")
    if isinstance(show, bool):
        return show
    return None


def get_end_behavior(config: Dict[str, Any]) -> Optional[EndBehavior]:
    raw = config.get("end")
    if not isinstance(raw, str):
        return None
    try:
        return EndBehavior(raw.lower())
    except ValueError:
        return None


def resolve_color(name: str) -> int:
    try:
        return COLORS[name.strip().lower()]
    except KeyError:
        known = ", ".join(COLORS)
        raise ConfigurationError(f"unknown color {name!r} (choose from {known})") from None


def build_options(
    config: Dict[str, Any],
    now: datetime,
    *,
    show_seconds: Optional[bool] = None,
    count_up: bool = False,
    end_behavior: Optional[EndBehavior] = None,
    duration: Optional[timedelta] = None,
    target: Optional[datetime] = None,
    color: Optional[str] = None,
) -> RenderOptions:
    if duration is not None and target is not None:
        raise ConfigurationError("give either a duration or -t, not both")
    if duration is not None:
        try:
            target = now + duration
        except OverflowError:
            raise ConfigurationError(f"duration {duration} runs past the end of the calendar") from None

    if show_seconds is None:
        show_seconds = get_show_seconds(config) or False

    explicit_end = end_behavior is not None
    if end_behavior is None:
        end_behavior = get_end_behavior(config) or EndBehavior.IMMEDIATELY
    if explicit_end and target is None and not count_up:
        raise ConfigurationError("-b/-f need a duration, -t or -u; the clock never ends")

    color_name = color or get_color_name(config) or DEFAULT_COLOR
    return RenderOptions(
        show_seconds=show_seconds,
        end_behavior=end_behavior,
        target=target,
        count_up=count_up,
        color=resolve_color(color_name),
    )
