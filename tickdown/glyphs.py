from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping

from .errors import UnknownSymbol

DIGIT_WIDTH = 5
GLYPH_HEIGHT = 5
SEPARATOR_WIDTH = 1
SEPARATOR = ":"
MARKER = "x"

SYMBOLS = tuple("0123456789") + (SEPARATOR,)

_DIGIT_ROWS = {
    "0": ("xxxxx", "x   x", "x   x", "x   x", "xxxxx"),
    "1": ("    x", "    x", "    x", "    x", "    x"),
    "2": ("xxxxx", "    x", "xxxxx", "x    ", "xxxxx"),
    "3": ("xxxxx", "    x", "xxxxx", "    x", "xxxxx"),
    "4": ("x   x", "x   x", "xxxxx", "    x", "    x"),
    "5": ("xxxxx", "x    ", "xxxxx", "    x", "xxxxx"),
    "6": ("xxxxx", "x    ", "xxxxx", "x   x", "xxxxx"),
    "7": ("xxxxx", "    x", "    x", "    x", "    x"),
    "8": ("xxxxx", "x   x", "xxxxx", "x   x", "xxxxx"),
    "9": ("xxxxx", "x   x", "xxxxx", "    x", "    x"),
}

_SEPARATOR_ROWS = (" ", "x", " ", "x", " ")


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)


@dataclass(frozen=True)
class GlyphDefinition:
    cells: FrozenSet[Point]
    width: int
    height: int = GLYPH_HEIGHT

    def __iter__(self) -> Iterator[Point]:
        return iter(self.cells)


def parse_glyph(text: str, width: int, height: int = GLYPH_HEIGHT, marker: str = MARKER) -> GlyphDefinition:
    cells = set()
    for y, line in enumerate(text.split("\n")):
        for x, ch in enumerate(line):
            if ch != marker:
                continue
            if x >= width or y >= height:
                raise ValueError(f"cell ({x}, {y}) outside {width}x{height} glyph box")
            cells.add(Point(x, y))
    return GlyphDefinition(cells=frozenset(cells), width=width, height=height)


class GlyphTable:
    def __init__(self, glyphs: Mapping[str, GlyphDefinition]) -> None:
        missing = [symbol for symbol in SYMBOLS if symbol not in glyphs]
        if missing:
            raise ValueError(f"glyph table is missing symbols: {''.join(missing)}")
        heights = {glyph.height for glyph in glyphs.values()}
        if len(heights) != 1:
            raise ValueError(f"glyphs must share one height, got {sorted(heights)}")
        self._glyphs = MappingProxyType(dict(glyphs))
        self.height = heights.pop()

    def glyph_for(self, symbol: str) -> GlyphDefinition:
        try:
            return self._glyphs[symbol]
        except KeyError:
            raise UnknownSymbol(symbol) from None


def build_glyph_table() -> GlyphTable:
    glyphs: Dict[str, GlyphDefinition] = {}
    for digit, rows in _DIGIT_ROWS.items():
        glyphs[digit] = parse_glyph("\n".join(rows), DIGIT_WIDTH)
    glyphs[SEPARATOR] = parse_glyph("\n".join(_SEPARATOR_ROWS), SEPARATOR_WIDTH)
    return GlyphTable(glyphs)
