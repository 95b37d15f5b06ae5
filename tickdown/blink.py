import itertools
import logging
from typing import Iterator, Tuple

from .signals import CancelToken
from .surface import Surface, block_style

log = logging.getLogger(__name__)

# on, off, on, long off
PULSE = ((True, 0.15), (False, 0.15), (True, 0.15), (False, 0.4))


def blink_pattern() -> Iterator[Tuple[bool, float]]:
    return itertools.cycle(PULSE)


def run_blink(surface: Surface, color: int, cancel: CancelToken) -> None:
    style = block_style(color)
    log.info("blinking until quit")
    for on, hold in blink_pattern():
        if cancel.cancelled:
            return
        if on:
            surface.fill(" ", style)
        else:
            surface.clear()
        surface.show()
        if cancel.wait(hold):
            return
