"""Error kinds raised by the Huffman codec.

I/O failures are not wrapped: they surface as the built-in OSError family.
"""


class HuffmanError(Exception):
    """Base class for codec errors that are not I/O failures."""


class UnknownSymbolError(HuffmanError, LookupError):
    """The encoder met a symbol that has no entry in the code table."""

    def __init__(self, symbol, position: int):
        self.symbol = symbol
        self.position = position # zero-based index in the input
        super().__init__(f"symbol {symbol!r} at position {position} has no code in the code table")


class FormatError(HuffmanError, ValueError):
    """The compressed bitstream is truncated or corrupted."""
