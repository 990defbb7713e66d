"""Binary layout of a persisted Huffman tree.

The tree is written as two blocks of node records: one in in-order
sequence and one in pre-order sequence. Together they determine the tree's
shape because every record carries a unique node id.

Stream layout (little-endian):

- Offset: uint64, ``8 + RECORD.size * node_count`` (end of the in-order block)
- In-order block: ``node_count`` records
- Pre-order block: ``node_count`` records

Record layout:

- Node id: uint16 (pre-order index of the node)
- Frequency: uint64
- Flags: uint8 (``HAS_SYMBOL`` set on leaves)
- Symbol: uint8 (meaningful only when ``HAS_SYMBOL`` is set)
"""
import struct
from typing import BinaryIO, Dict, List, Tuple

from bintree import BinaryTree, LEFT, RIGHT
from errors import CorruptStreamError
from huffman import HuffmanNode, HuffmanTree

OFFSET = struct.Struct("<Q")
RECORD = struct.Struct("<HQBB")
HAS_SYMBOL = 0x01
MAX_NODES = 2 * 256 - 1  #: Full binary tree over every byte value

Record = Tuple[int, HuffmanNode]


def serialize_tree(tree: HuffmanTree) -> bytes:
    """Encode ``tree`` as offset, in-order block and pre-order block.

    :param tree: Tree to serialize.
    :type tree: HuffmanTree
    :returns: Serialized tree.
    :rtype: bytes
    """
    nodes = tree.nodes
    ids = {node: i for i, node in enumerate(nodes.iter_pre_order(tree.root))}

    def record(node: int) -> bytes:
        value = nodes.value(node)
        flags = HAS_SYMBOL if value.symbol is not None else 0
        return RECORD.pack(ids[node], value.frequency, flags, value.symbol or 0)

    in_block = b"".join(record(n) for n in nodes.iter_in_order(tree.root))
    pre_block = b"".join(record(n) for n in nodes.iter_pre_order(tree.root))
    return OFFSET.pack(OFFSET.size + len(in_block)) + in_block + pre_block


def write_tree(tree: HuffmanTree, sink: BinaryIO) -> int:
    """Write the serialized ``tree`` to ``sink``.

    :returns: Number of bytes written.
    :rtype: int
    """
    data = serialize_tree(tree)
    sink.write(data)
    return len(data)


def read_tree(source: BinaryIO) -> HuffmanTree:
    """Read and rebuild a tree written by :func:`write_tree`.

    Leaves ``source`` positioned right after the pre-order block.

    :param source: Readable binary stream.
    :type source: BinaryIO
    :returns: The reconstructed tree.
    :rtype: HuffmanTree
    :raises CorruptStreamError: If the stream is short or inconsistent.
    """
    (offset,) = OFFSET.unpack(_read_exact(source, OFFSET.size, "tree offset"))
    block_size = offset - OFFSET.size
    count, rest = divmod(block_size, RECORD.size)
    if block_size <= 0 or rest or count > MAX_NODES:
        raise CorruptStreamError(f"Invalid tree offset: {offset}")

    in_order = _parse_block(_read_exact(source, block_size, "in-order block"))
    pre_order = _parse_block(_read_exact(source, block_size, "pre-order block"))
    tree = _rebuild(in_order, pre_order)
    _check_huffman_shape(tree)
    return tree


def _read_exact(source: BinaryIO, size: int, what: str) -> bytes:
    data = source.read(size)
    if len(data) != size:
        raise CorruptStreamError(
            f"Stream ended while reading {what}: "
            f"expected {size} bytes, got {len(data)}"
        )
    return data


def _parse_block(block: bytes) -> List[Record]:
    records = []
    for node_id, frequency, flags, symbol in RECORD.iter_unpack(block):
        if flags & ~HAS_SYMBOL:
            raise CorruptStreamError(f"Unknown flags {flags:#x} on node {node_id}")
        if frequency == 0:
            raise CorruptStreamError(f"Node {node_id} has zero frequency")
        value = HuffmanNode(frequency, symbol if flags & HAS_SYMBOL else None)
        records.append((node_id, value))
    return records


def _rebuild(in_order: List[Record], pre_order: List[Record]) -> HuffmanTree:
    """Rebuild a tree from its in-order and pre-order records.

    The first pre-order record of a range is the subtree root. Its position
    in the in-order range splits that range into left and right parts; the
    pre-order records that follow and belong to the left part form the left
    subtree, the rest the right subtree.
    """
    in_ids = [node_id for node_id, _ in in_order]
    pre_ids = [node_id for node_id, _ in pre_order]
    values: Dict[int, HuffmanNode] = dict(pre_order)
    if len(values) != len(pre_ids) or len(set(in_ids)) != len(in_ids):
        raise CorruptStreamError("Duplicate node ids in tree blocks")
    if dict(in_order) != values:
        raise CorruptStreamError("In-order and pre-order blocks disagree")

    position = {node_id: i for i, node_id in enumerate(in_ids)}
    nodes = BinaryTree()

    def build(pre_lo: int, pre_hi: int, in_lo: int, in_hi: int) -> int:
        node_id = pre_ids[pre_lo]
        pos = position[node_id]
        if not in_lo <= pos < in_hi:
            raise CorruptStreamError(f"Node {node_id} not found in in-order range")

        left_members = set(in_ids[in_lo:pos])
        left_count = 0
        for other in pre_ids[pre_lo + 1:pre_hi]:
            if other not in left_members:
                break
            left_count += 1
        if left_count != pos - in_lo:
            raise CorruptStreamError(f"Left subtree of node {node_id} is inconsistent")

        node = nodes.add(values[node_id])
        split = pre_lo + 1 + left_count
        if left_count:
            nodes.attach(node, build(pre_lo + 1, split, in_lo, pos), LEFT)
        if pos + 1 < in_hi:
            nodes.attach(node, build(split, pre_hi, pos + 1, in_hi), RIGHT)
        return node

    root = build(0, len(pre_ids), 0, len(in_ids))
    return HuffmanTree(nodes, root)


def _check_huffman_shape(tree: HuffmanTree) -> None:
    nodes = tree.nodes
    symbols = set()
    for node in nodes.iter_pre_order(tree.root):
        value = nodes.value(node)
        left, right = nodes.left(node), nodes.right(node)
        if value.symbol is not None:
            if not nodes.is_leaf(node):
                raise CorruptStreamError(f"Leaf {value} has children")
            if value.symbol in symbols:
                raise CorruptStreamError(f"Symbol {value.symbol} appears twice")
            symbols.add(value.symbol)
        elif left is None or right is None:
            raise CorruptStreamError(f"Internal node {value} needs two children")
        elif nodes.value(left).frequency + nodes.value(right).frequency != value.frequency:
            raise CorruptStreamError(f"Frequency of {value} is not the sum of its children")
