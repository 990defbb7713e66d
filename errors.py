class HuffmanError(Exception):
    """Base class for every error raised by the Huffman codec."""


class EmptyInputError(HuffmanError, ValueError):
    """Raised when a tree is requested for input with no symbols."""


class UnrepresentableSymbolError(HuffmanError, ValueError):
    """Raised when a byte has no entry in the encoding table.

    :ivar symbol: The byte value that could not be encoded.
    :type symbol: int
    """

    def __init__(self, symbol: int):
        super().__init__(f"Symbol {symbol:#04x} has no Huffman code")
        self.symbol = symbol


class CorruptStreamError(HuffmanError, ValueError):
    """Raised when a persisted stream is short or structurally invalid."""


class TruncatedDecodeError(HuffmanError, EOFError):
    """Raised when the bit stream ends before all symbols are decoded."""
