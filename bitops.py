from typing import Iterable, Iterator


class BitWriter:
    """Bit-packing writer.

    Accumulates individual bits into bytes, least-significant bit first,
    and buffers them until flushed.

    :ivar buffer: Internal byte buffer holding fully written bytes.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    """

    def __init__(self):
        """Initialize an empty bit writer.

        :returns: None
        :rtype: None
        """
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0

    @property
    def bit_length(self) -> int:
        """Total number of bits written so far, padding excluded."""
        return len(self.buffer) * 8 + self.bit_count

    def write_bit(self, bit: int):
        """Append a single bit.

        :param bit: Bit to write; any truthy value counts as ``1``.
        :type bit: int
        :returns: None
        :rtype: None
        """
        if bit:
            self.bit_buffer |= 1 << self.bit_count
        self.bit_count += 1
        if self.bit_count == 8:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value``, low bit first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        for i in range(nbits):
            self.write_bit((value >> i) & 1)

    def write_code(self, code: Iterable[int]):
        """Write a Huffman code, first path step first.

        :param code: Sequence of ``0``/``1`` path decisions.
        :type code: Iterable[int]
        :returns: None
        :rtype: None
        """
        for bit in code:
            self.write_bit(bit)

    def flush(self) -> bytes:
        """Flush remaining bits (if any) and return the full byte buffer.

        A partial byte is zero-padded in its high bits.

        :returns: The accumulated bytes written so far.
        :rtype: bytes
        """
        if self.bit_count > 0:
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)


class BitReader:
    """Bit-unpacking reader.

    Reads bits least-significant first from a bytes-like object.

    :ivar data: Input data to read bits from.
    :type data: bytes
    :ivar pos: Current position in ``data`` (byte index).
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    """

    def __init__(self, data: bytes):
        """Create a bit reader for the given input ``data``.

        :param data: Source data to read from.
        :type data: bytes
        :returns: None
        :rtype: None
        """
        self.data = data
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0

    @property
    def bits_remaining(self) -> int:
        return (len(self.data) - self.pos) * 8 + self.bit_count

    def read_bit(self) -> int:
        """Read the next bit.

        :returns: ``0`` or ``1``.
        :rtype: int
        :raises EOFError: If the end of data has been reached.
        """
        if self.bit_count == 0:
            if self.pos >= len(self.data):
                raise EOFError("Unexpected end of data")
            self.bit_buffer = self.data[self.pos]
            self.pos += 1
            self.bit_count = 8
        bit = self.bit_buffer & 1
        self.bit_buffer >>= 1
        self.bit_count -= 1
        return bit

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits, the first one read becoming the low bit.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The integer value composed of the next ``nbits`` bits.
        :rtype: int
        :raises EOFError: If the end of data is reached before reading ``nbits``.
        """
        result = 0
        for i in range(nbits):
            result |= self.read_bit() << i
        return result


def pack_bits(bits: Iterable[int]) -> bytes:
    """Group a flat bit sequence into bytes, LSB first."""
    writer = BitWriter()
    writer.write_code(bits)
    return writer.flush()


def unpack_bits(data: bytes) -> Iterator[int]:
    """Yield every bit of ``data``, LSB first within each byte."""
    for byte in data:
        for i in range(8):
            yield (byte >> i) & 1
