import curses
import logging
import os
import sys
import threading
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple, Union

from .errors import SurfaceInitError

log = logging.getLogger(__name__)

BLOCK_CHAR = "█"


@dataclass(frozen=True)
class Style:
    foreground: Optional[int] = None
    background: Optional[int] = None


DEFAULT_STYLE = Style()


def block_style(color: int) -> Style:
    return Style(background=color)


def text_style(color: int) -> Style:
    return Style(foreground=color)


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class KeyEvent:
    code: int
    rune: Optional[str] = None


Event = Union[ResizeEvent, KeyEvent]
Cell = Tuple[str, Style]


class Surface(ABC):
    @abstractmethod
    def init(self) -> None: ...

    @abstractmethod
    def size(self) -> Tuple[int, int]: ...

    @abstractmethod
    def clear(self) -> None: ...

    @abstractmethod
    def set_cell(self, x: int, y: int, ch: str, style: Style = DEFAULT_STYLE) -> None: ...

    @abstractmethod
    def fill(self, ch: str, style: Style = DEFAULT_STYLE) -> None: ...

    @abstractmethod
    def show(self) -> None: ...

    @abstractmethod
    def sync(self) -> None: ...

    @abstractmethod
    def poll_event(self) -> Optional[Event]: ...

    @abstractmethod
    def finalize(self) -> None: ...


class CursesSurface(Surface):
    """Surface on the controlling terminal.

    curses is not thread-safe, so every call goes through one lock: the
    input listener polls from its own thread while the run loop paints.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._stdscr = None
        self._pairs: Dict[Tuple[int, int], int] = {}
        self._default_colors = False

    def init(self) -> None:
        with self._lock:
            os.environ.setdefault("ESCDELAY", "25")
            try:
                stdscr = curses.initscr()
            except curses.error as exc:
                raise SurfaceInitError(f"cannot open terminal: {exc}") from exc
            sys.stdout.write("\x1b[?1049h")
            sys.stdout.flush()
            curses.noecho()
            # raw, not cbreak: Ctrl-C must arrive as a key, not as SIGINT
            curses.raw()
            stdscr.keypad(True)
            stdscr.nodelay(True)
            try:
                curses.curs_set(0)
            except curses.error:
                pass
            if curses.has_colors():
                curses.start_color()
                try:
                    curses.use_default_colors()
                    self._default_colors = True
                except curses.error:
                    self._default_colors = False
            self._stdscr = stdscr
            rows, cols = stdscr.getmaxyx()
            log.info("surface initialised %dx%d", cols, rows)

    def size(self) -> Tuple[int, int]:
        with self._lock:
            rows, cols = self._stdscr.getmaxyx()
            return cols, rows

    def clear(self) -> None:
        with self._lock:
            self._stdscr.erase()

    def set_cell(self, x: int, y: int, ch: str, style: Style = DEFAULT_STYLE) -> None:
        with self._lock:
            rows, cols = self._stdscr.getmaxyx()
            if not (0 <= x < cols and 0 <= y < rows):
                return
            try:
                self._stdscr.addstr(y, x, ch, self._attr(style))
            except curses.error:
                # writing the bottom-right cell moves the cursor off screen
                pass

    def fill(self, ch: str, style: Style = DEFAULT_STYLE) -> None:
        with self._lock:
            rows, cols = self._stdscr.getmaxyx()
            attr = self._attr(style)
            line = ch * cols
            for y in range(rows):
                try:
                    self._stdscr.addstr(y, 0, line, attr)
                except curses.error:
                    pass

    def show(self) -> None:
        with self._lock:
            self._stdscr.refresh()

    def sync(self) -> None:
        with self._lock:
            curses.update_lines_cols()
            self._stdscr.clearok(True)
            self._stdscr.refresh()

    def poll_event(self) -> Optional[Event]:
        with self._lock:
            if self._stdscr is None:
                return None
            ch = self._stdscr.getch()
            if ch == -1:
                return None
            if ch == curses.KEY_RESIZE:
                rows, cols = self._stdscr.getmaxyx()
                return ResizeEvent(width=cols, height=rows)
            rune = chr(ch) if 0 <= ch <= 255 else None
            return KeyEvent(code=ch, rune=rune)

    def finalize(self) -> None:
        with self._lock:
            if self._stdscr is None:
                return
            curses.noraw()
            self._stdscr.keypad(False)
            curses.echo()
            curses.endwin()
            sys.stdout.write("\x1b[?1049l")
            sys.stdout.flush()
            self._stdscr = None
            log.info("surface finalised")

    def _attr(self, style: Style) -> int:
        if style == DEFAULT_STYLE:
            return curses.A_NORMAL
        if not curses.has_colors():
            return curses.A_REVERSE if style.background is not None else curses.A_BOLD
        return curses.color_pair(self._pair(style))

    def _pair(self, style: Style) -> int:
        fallback_fg = -1 if self._default_colors else curses.COLOR_WHITE
        fallback_bg = -1 if self._default_colors else curses.COLOR_BLACK
        key = (
            fallback_fg if style.foreground is None else style.foreground,
            fallback_bg if style.background is None else style.background,
        )
        pair = self._pairs.get(key)
        if pair is None:
            pair = len(self._pairs) + 1
            curses.init_pair(pair, key[0], key[1])
            self._pairs[key] = pair
        return pair


class MemorySurface(Surface):
    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.cells: Dict[Tuple[int, int], Cell] = {}
        self.frames: List[Dict[Tuple[int, int], Cell]] = []
        self.syncs = 0
        self.initialised = False
        self.finalised = False
        self._events: Deque[Event] = deque()

    def init(self) -> None:
        self.initialised = True

    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._events.append(ResizeEvent(width=width, height=height))

    def clear(self) -> None:
        self.cells = {}

    def set_cell(self, x: int, y: int, ch: str, style: Style = DEFAULT_STYLE) -> None:
        if 0 <= x < self.width and 0 <= y < self.height:
            self.cells[(x, y)] = (ch, style)

    def fill(self, ch: str, style: Style = DEFAULT_STYLE) -> None:
        self.cells = {(x, y): (ch, style) for y in range(self.height) for x in range(self.width)}

    def show(self) -> None:
        self.frames.append(dict(self.cells))

    def sync(self) -> None:
        self.syncs += 1

    def push_event(self, event: Event) -> None:
        self._events.append(event)

    def poll_event(self) -> Optional[Event]:
        if self._events:
            return self._events.popleft()
        return None

    def finalize(self) -> None:
        self.finalised = True

    def to_text(self, cells: Optional[Dict[Tuple[int, int], Cell]] = None) -> str:
        cells = self.cells if cells is None else cells
        lines = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                ch, style = cells.get((x, y), (" ", DEFAULT_STYLE))
                if ch == " " and style.background is not None:
                    ch = BLOCK_CHAR
                row.append(ch)
            lines.append("".join(row).rstrip())
        return "\n".join(lines)
