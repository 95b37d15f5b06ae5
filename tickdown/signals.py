import logging
import threading
from typing import Optional

from .surface import KeyEvent, ResizeEvent, Surface

log = logging.getLogger(__name__)

KEY_ESC = 27
KEY_CTRL_C = 3
QUIT_RUNES = ("q", "Q")
POLL_INTERVAL = 0.05


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "") -> bool:
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()
        log.info("cancelled: %s", reason or "no reason given")
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


def is_quit_key(event: KeyEvent) -> bool:
    return event.code in (KEY_ESC, KEY_CTRL_C) or event.rune in QUIT_RUNES


class InputListener(threading.Thread):
    def __init__(self, surface: Surface, cancel: CancelToken, poll_interval: float = POLL_INTERVAL) -> None:
        super().__init__(name="tickdown-input", daemon=True)
        self.surface = surface
        self.cancel = cancel
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            event = self.surface.poll_event()
            if event is None:
                self._stop_event.wait(self.poll_interval)
                continue
            self.dispatch(event)

    def dispatch(self, event) -> None:
        if isinstance(event, ResizeEvent):
            log.debug("resize to %dx%d", event.width, event.height)
            self.surface.sync()
        elif isinstance(event, KeyEvent) and is_quit_key(event):
            self.cancel.cancel(f"key {event.code}")

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)
