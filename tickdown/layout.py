from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .glyphs import DIGIT_WIDTH, GLYPH_HEIGHT, SEPARATOR, SEPARATOR_WIDTH, Point


class Mode(Enum):
    LARGE_GLYPH = "large"
    TEXT_FALLBACK = "text"


@dataclass(frozen=True)
class LayoutResult:
    mode: Mode
    width: int
    height: int
    origin: Point


def template(show_seconds: bool) -> str:
    return "00:00:00" if show_seconds else "00:00"


def decide_mode(screen_width: int, screen_height: int, show_seconds: bool) -> Mode:
    if screen_height >= GLYPH_HEIGHT:
        return Mode.LARGE_GLYPH
    return Mode.TEXT_FALLBACK


def compute_dimensions(mode: Mode, show_seconds: bool) -> Tuple[int, int]:
    text = template(show_seconds)
    if mode is Mode.TEXT_FALLBACK:
        return len(text), 1
    width = sum(SEPARATOR_WIDTH if ch == SEPARATOR else DIGIT_WIDTH for ch in text)
    return width + len(text) - 1, GLYPH_HEIGHT


def center_offset(screen_width: int, screen_height: int, width: int, height: int) -> Point:
    return Point((screen_width - width) // 2, (screen_height - height) // 2)


def layout(screen_width: int, screen_height: int, show_seconds: bool) -> LayoutResult:
    mode = decide_mode(screen_width, screen_height, show_seconds)
    width, height = compute_dimensions(mode, show_seconds)
    origin = center_offset(screen_width, screen_height, width, height)
    return LayoutResult(mode=mode, width=width, height=height, origin=origin)
