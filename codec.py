from typing import BinaryIO, Callable, Dict, Optional, Tuple

from huffman import (
    Code,
    HuffmanTree,
    build_encoding_table,
    build_tree,
    count_frequencies,
    decode_symbols,
    encode_symbols,
)
from treecodec import read_tree, write_tree


class HuffmanCodec:
    """Static Huffman coder for one byte sequence.

    Holds the tree built from (or read back for) a byte sequence together
    with the derived encoding table.

    :ivar data: Original uncompressed bytes.
    :type data: bytes
    :ivar tree: Huffman tree for ``data``.
    :type tree: HuffmanTree
    :ivar table: Mapping byte value -> code.
    :type table: Dict[int, Tuple[int, ...]]
    """

    def __init__(self, data: bytes, tree: HuffmanTree):
        """Bind ``data`` to an existing ``tree`` and derive its table.

        Prefer :meth:`build` or :meth:`load` to construct a codec.

        :param data: Uncompressed bytes.
        :type data: bytes
        :param tree: Tree covering every byte of ``data``.
        :type tree: HuffmanTree
        :returns: None
        :rtype: None
        """
        self.data = bytes(data)
        self.tree = tree
        self.table: Dict[int, Code] = build_encoding_table(tree)

    @classmethod
    def build(cls, data: bytes) -> "HuffmanCodec":
        """Count ``data``'s bytes, build the tree and the encoding table.

        :param data: Bytes to compress.
        :type data: bytes
        :returns: Ready-to-use codec.
        :rtype: HuffmanCodec
        :raises EmptyInputError: If ``data`` is empty.
        """
        return cls(data, build_tree(count_frequencies(data)))

    def encoded_bit_length(self) -> int:
        """Exact number of payload bits for the stored data."""
        frequencies = count_frequencies(self.data)
        return sum(freq * len(self.table[s]) for s, freq in frequencies.items())

    def compression_ratio(self) -> float:
        """Ratio of original size to packed payload size."""
        packed = (self.encoded_bit_length() + 7) // 8
        return len(self.data) / packed

    def compress(
        self,
        data: Optional[bytes] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Pack the stored bytes (or ``data``) with this codec's codes.

        :param data: Bytes to encode instead of the stored ones; every byte
            must have a code in :attr:`table`.
        :type data: Optional[bytes]
        :param on_progress: Optional callback ``on_progress(done, total)``
            reporting input bytes processed.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Packed bit stream, LSB first.
        :rtype: bytes
        :raises UnrepresentableSymbolError: If a byte has no code.
        """
        if data is None:
            data = self.data
        return encode_symbols(data, self.table, on_progress=on_progress)

    def decompress(
        self,
        data: bytes,
        symbol_count: Optional[int] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> bytes:
        """Decode a packed bit stream produced with this codec's tree.

        :param data: Packed bit stream.
        :type data: bytes
        :param symbol_count: Number of bytes to decode; defaults to the
            tree's total frequency.
        :type symbol_count: Optional[int]
        :param on_progress: Optional callback ``on_progress(done, total)``
            reporting recovered bytes.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Decoded bytes.
        :rtype: bytes
        :raises TruncatedDecodeError: If ``data`` ends too early.
        """
        if symbol_count is None:
            symbol_count = self.tree.symbol_count
        return decode_symbols(self.tree, data, symbol_count, on_progress=on_progress)

    def save(
        self,
        sink: BinaryIO,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> int:
        """Write the tree followed by the compressed payload to ``sink``.

        :param sink: Writable binary stream.
        :type sink: BinaryIO
        :param on_progress: Forwarded to :meth:`compress`.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: Total number of bytes written.
        :rtype: int
        """
        written = write_tree(self.tree, sink)
        payload = self.compress(on_progress=on_progress)
        sink.write(payload)
        return written + len(payload)

    @classmethod
    def load(
        cls,
        source: BinaryIO,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> Tuple["HuffmanCodec", bytes]:
        """Read a stream written by :meth:`save` and decode its payload.

        :param source: Readable binary stream positioned at the tree offset.
        :type source: BinaryIO
        :param on_progress: Forwarded to :meth:`decompress`.
        :type on_progress: Optional[Callable[[int, int], None]]
        :returns: The reconstructed codec (its :attr:`data` holds the
            decoded bytes) and the raw compressed payload.
        :rtype: Tuple[HuffmanCodec, bytes]
        :raises CorruptStreamError: If the tree section is invalid.
        :raises TruncatedDecodeError: If the payload is too short.
        """
        tree = read_tree(source)
        payload = source.read()
        data = decode_symbols(tree, payload, tree.symbol_count, on_progress=on_progress)
        return cls(data, tree), payload
