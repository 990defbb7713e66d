import heapq
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple

from bintree import BinaryTree, LEFT, RIGHT
from bitops import BitReader, BitWriter
from errors import EmptyInputError, TruncatedDecodeError, UnrepresentableSymbolError

PROGRESS_STEP = 4096  #: Bytes processed between two progress callbacks

Code = Tuple[int, ...]


class HuffmanNode:
    """Payload of a Huffman tree node.

    :ivar frequency: Weight of the subtree rooted at this node.
    :type frequency: int
    :ivar symbol: Byte value stored at a leaf; ``None`` for merged nodes.
    :type symbol: int | None
    """

    __slots__ = ("frequency", "symbol")

    def __init__(self, frequency: int, symbol: Optional[int] = None):
        """Create a node payload.

        :param int frequency: Occurrence count (or merged count).
        :param symbol: Byte value for leaves, ``None`` for internal nodes.
        :type symbol: int | None
        :returns: None
        :rtype: None
        """
        self.frequency = frequency
        self.symbol = symbol

    @property
    def is_leaf(self) -> bool:
        return self.symbol is not None

    def __eq__(self, other):
        if not isinstance(other, HuffmanNode):
            return NotImplemented
        return (self.frequency, self.symbol) == (other.frequency, other.symbol)

    def __hash__(self):
        return hash((self.frequency, self.symbol))

    def __repr__(self):
        return f"HuffmanNode({self.frequency}, {self.symbol!r})"

    def __str__(self):
        if self.symbol is None:
            return f"({self.frequency}, None)"
        return f"({self.frequency}, {chr(self.symbol)!r})"


class HuffmanTree:
    """A finished Huffman tree: the node arena plus the id of its root.

    :ivar nodes: Arena holding :class:`HuffmanNode` payloads.
    :type nodes: BinaryTree
    :ivar root: Id of the root node inside ``nodes``.
    :type root: int
    """

    def __init__(self, nodes: BinaryTree, root: int):
        self.nodes = nodes
        self.root = root

    @property
    def symbol_count(self) -> int:
        """Number of input bytes the tree was built from."""
        return self.nodes.value(self.root).frequency

    def size(self) -> int:
        return self.nodes.size(self.root)

    def leaf_count(self) -> int:
        return len(self.nodes.leaves(self.root))

    def render(self) -> List[str]:
        return self.nodes.render(self.root)

    def shape(self) -> List[Tuple[int, Optional[int], bool, bool]]:
        """Pre-order list of node values with child presence flags.

        Two trees with equal shapes are structurally identical.
        """
        nodes = self.nodes
        return [
            (
                nodes.value(n).frequency,
                nodes.value(n).symbol,
                nodes.left(n) is not None,
                nodes.right(n) is not None,
            )
            for n in nodes.iter_pre_order(self.root)
        ]

    def __eq__(self, other):
        if not isinstance(other, HuffmanTree):
            return NotImplemented
        return self.shape() == other.shape()


def count_frequencies(data: bytes) -> Counter:
    """Count occurrences of every distinct byte in ``data``.

    :param data: Raw input bytes.
    :type data: bytes
    :returns: Mapping byte value -> count; empty for empty input.
    :rtype: Counter
    """
    return Counter(data)


def build_tree(
    frequencies: Dict[int, int],
    on_merge: Optional[Callable[[BinaryTree, int], None]] = None,
) -> HuffmanTree:
    """Build a Huffman tree by repeatedly merging the two lightest nodes.

    Ties on frequency are broken by a secondary key: the symbol value for
    leaves, ``256 + n`` for the ``n``-th merged node. Equal weights thus pop
    leaves before merged nodes, leaves in ascending symbol order and merged
    nodes in creation order, which makes the tree reproducible.

    The first node popped becomes the right child (code bit ``1``), the
    second the left child (code bit ``0``). A single symbol yields a tree
    whose root is that leaf.

    :param frequencies: Mapping from byte value to positive count.
    :type frequencies: Dict[int, int]
    :param on_merge: Optional tracing hook ``on_merge(nodes, node_id)``
        called after every merge.
    :type on_merge: Optional[Callable[[BinaryTree, int], None]]
    :returns: The finished tree.
    :rtype: HuffmanTree
    :raises EmptyInputError: If ``frequencies`` is empty.
    :raises ValueError: If a symbol is not a byte or a count is not positive.
    """
    if not frequencies:
        raise EmptyInputError("Cannot build a Huffman tree from empty input")

    nodes = BinaryTree()
    heap = []
    for symbol in sorted(frequencies):
        freq = frequencies[symbol]
        if not 0 <= symbol <= 255:
            raise ValueError(f"Symbol out of byte range: {symbol}")
        if freq <= 0:
            raise ValueError(f"Frequency of symbol {symbol} must be positive")
        heap.append((freq, symbol, nodes.add(HuffmanNode(freq, symbol))))
    heapq.heapify(heap)

    tie_key = 256
    while len(heap) > 1:
        freq_a, _, a = heapq.heappop(heap)
        freq_b, _, b = heapq.heappop(heap)
        merged = nodes.add(HuffmanNode(freq_a + freq_b))
        nodes.attach(merged, a, RIGHT)
        nodes.attach(merged, b, LEFT)
        heapq.heappush(heap, (freq_a + freq_b, tie_key, merged))
        tie_key += 1
        if on_merge is not None:
            on_merge(nodes, merged)

    return HuffmanTree(nodes, heap[0][2])


def build_encoding_table(tree: HuffmanTree) -> Dict[int, Code]:
    """Derive the code of every leaf by walking the tree depth first.

    A lone leaf at the root gets the one-bit code ``(0,)``.

    :param tree: Finished Huffman tree.
    :type tree: HuffmanTree
    :returns: Mapping byte value -> root-to-leaf path (``1`` = right).
    :rtype: Dict[int, Tuple[int, ...]]
    """
    nodes = tree.nodes
    table: Dict[int, Code] = {}

    if nodes.is_leaf(tree.root):
        table[nodes.value(tree.root).symbol] = (LEFT,)
        return table

    def walk(node: int, path: Code):
        value = nodes.value(node)
        if value.symbol is not None:
            table[value.symbol] = path
            return
        for side in (LEFT, RIGHT):
            child = nodes.child(node, side)
            if child is not None:
                walk(child, path + (side,))

    walk(tree.root, ())
    return table


def encode_symbols(
    data: bytes,
    table: Dict[int, Code],
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> bytes:
    """Pack the codes of every byte of ``data`` into a bit stream.

    :param data: Bytes to encode.
    :type data: bytes
    :param table: Encoding table from :func:`build_encoding_table`.
    :type table: Dict[int, Tuple[int, ...]]
    :param on_progress: Optional callback ``on_progress(done, total)``.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: Packed bits, LSB first, zero-padded to a whole byte.
    :rtype: bytes
    :raises UnrepresentableSymbolError: If a byte has no code.
    """
    writer = BitWriter()
    total = len(data)
    for pos, symbol in enumerate(data):
        code = table.get(symbol)
        if code is None:
            raise UnrepresentableSymbolError(symbol)
        writer.write_code(code)
        if on_progress is not None and pos % PROGRESS_STEP == 0:
            on_progress(pos, total)
    if on_progress is not None:
        on_progress(total, total)
    return writer.flush()


def decode_symbols(
    tree: HuffmanTree,
    data: bytes,
    symbol_count: int,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> bytes:
    """Walk the tree along the bits of ``data`` and collect leaf symbols.

    Decoding stops after exactly ``symbol_count`` symbols, so padding bits
    at the end of the stream are never interpreted.

    :param tree: Tree the stream was encoded with.
    :type tree: HuffmanTree
    :param data: Packed bit stream.
    :type data: bytes
    :param symbol_count: Number of symbols to decode.
    :type symbol_count: int
    :param on_progress: Optional callback ``on_progress(done, total)``.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: Decoded bytes.
    :rtype: bytes
    :raises TruncatedDecodeError: If the bits run out first.
    """
    nodes = tree.nodes
    reader = BitReader(data)
    out = bytearray()
    try:
        while len(out) < symbol_count:
            node = tree.root
            if nodes.is_leaf(node):
                reader.read_bit()
            while not nodes.is_leaf(node):
                node = nodes.child(node, reader.read_bit())
            out.append(nodes.value(node).symbol)
            if on_progress is not None and len(out) % PROGRESS_STEP == 0:
                on_progress(len(out), symbol_count)
    except EOFError as e:
        raise TruncatedDecodeError(
            f"Bit stream ended after {len(out)} of {symbol_count} symbols"
        ) from e
    if on_progress is not None:
        on_progress(symbol_count, symbol_count)
    return bytes(out)
