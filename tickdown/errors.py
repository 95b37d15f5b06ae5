class ConfigurationError(Exception):
    pass


class SurfaceInitError(Exception):
    pass


class UnknownSymbol(KeyError):
    def __init__(self, symbol: str) -> None:
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self) -> str:
        return f"no glyph for symbol {self.symbol!r}"
