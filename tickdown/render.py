from .config import RenderOptions
from .glyphs import GlyphTable, Point
from .layout import LayoutResult, Mode, layout
from .surface import Surface, block_style, text_style
from .timecalc import DisplayValue


class Renderer:
    def __init__(self, glyphs: GlyphTable) -> None:
        self.glyphs = glyphs

    def paint(self, surface: Surface, options: RenderOptions, value: DisplayValue) -> LayoutResult:
        surface.clear()
        width, height = surface.size()
        result = layout(width, height, options.show_seconds)
        if result.mode is Mode.LARGE_GLYPH:
            self._paint_glyphs(surface, result.origin, value.symbols(options.show_seconds), options.color)
        else:
            self._paint_line(surface, result.origin, value.text(options.show_seconds), options.color)
        return result

    def _paint_glyphs(self, surface: Surface, origin: Point, symbols: str, color: int) -> None:
        style = block_style(color)
        cursor = origin
        for symbol in symbols:
            glyph = self.glyphs.glyph_for(symbol)
            for cell in glyph:
                at = cursor + cell
                surface.set_cell(at.x, at.y, " ", style)
            cursor = Point(cursor.x + glyph.width + 1, cursor.y)

    def _paint_line(self, surface: Surface, origin: Point, text: str, color: int) -> None:
        style = text_style(color)
        for i, ch in enumerate(text):
            surface.set_cell(origin.x + i, origin.y, ch, style)
