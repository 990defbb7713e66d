import pytest

from bintree import LEFT, RIGHT
from errors import EmptyInputError, TruncatedDecodeError, UnrepresentableSymbolError
from huffman import (
    HuffmanNode,
    build_encoding_table,
    build_tree,
    count_frequencies,
    decode_symbols,
    encode_symbols,
)


def test_count_frequencies():
    assert count_frequencies(b"aabbbc") == {ord("a"): 2, ord("b"): 3, ord("c"): 1}
    assert count_frequencies(b"") == {}


def test_build_tree_empty_raises():
    with pytest.raises(EmptyInputError):
        build_tree({})


@pytest.mark.parametrize("freqs", [{300: 1}, {-1: 2}, {65: 0}])
def test_build_tree_rejects_bad_frequencies(freqs):
    with pytest.raises(ValueError):
        build_tree(freqs)


def test_build_tree_aabbbc_shape_and_codes():
    tree = build_tree(count_frequencies(b"aabbbc"))
    nodes = tree.nodes
    assert tree.size() == 5
    assert tree.leaf_count() == 3
    assert tree.symbol_count == 6

    root = nodes.value(tree.root)
    assert root == HuffmanNode(6)
    assert nodes.value(nodes.right(tree.root)) == HuffmanNode(3, ord("b"))

    table = build_encoding_table(tree)
    assert table == {
        ord("b"): (RIGHT,),
        ord("a"): (LEFT, LEFT),
        ord("c"): (LEFT, RIGHT),
    }


def test_equal_frequencies_follow_tie_break_rule():
    tree = build_tree({4: 1, 3: 1, 2: 1, 1: 1})
    table = build_encoding_table(tree)
    assert table == {
        1: (1, 1),
        2: (1, 0),
        3: (0, 1),
        4: (0, 0),
    }


def test_build_is_deterministic(sample_text):
    t1 = build_tree(count_frequencies(sample_text))
    t2 = build_tree(count_frequencies(sample_text))
    assert t1 == t2
    assert build_encoding_table(t1) == build_encoding_table(t2)


def test_single_symbol_tree_uses_one_bit_code():
    tree = build_tree({ord("a"): 4})
    assert tree.size() == 1
    assert tree.nodes.is_leaf(tree.root)
    assert build_encoding_table(tree) == {ord("a"): (0,)}


def test_tree_size_is_2k_minus_1():
    freqs = {s: s + 1 for s in range(256)}
    tree = build_tree(freqs)
    assert tree.leaf_count() == 256
    assert tree.size() == 2 * 256 - 1


def test_codes_are_prefix_free(sample_text):
    data = sample_text + bytes(range(256))
    table = build_encoding_table(build_tree(count_frequencies(data)))
    assert len(table) == 256
    codes = list(table.values())
    for i, a in enumerate(codes):
        for b in codes[i + 1:]:
            assert a[:len(b)] != b
            assert b[:len(a)] != a


def test_on_merge_hook_sees_every_merge():
    seen = []
    build_tree(count_frequencies(b"abcdab"), on_merge=lambda nodes, n: seen.append(nodes.value(n)))
    assert [v.frequency for v in seen] == [2, 4, 6]
    assert all(v.symbol is None for v in seen)


def test_encode_aabbbc_bits():
    tree = build_tree(count_frequencies(b"aabbbc"))
    table = build_encoding_table(tree)
    packed = encode_symbols(b"aabbbc", table)
    # a=00 a=00 b=1 b=1 b=1 c=01, LSB first
    assert packed == bytes([0b01110000, 0b00000001])
    assert decode_symbols(tree, packed, 6) == b"aabbbc"


def test_encode_unknown_symbol_raises():
    table = build_encoding_table(build_tree(count_frequencies(b"ab")))
    with pytest.raises(UnrepresentableSymbolError) as exc:
        encode_symbols(b"abz", table)
    assert exc.value.symbol == ord("z")


def test_decode_ignores_padding_bits():
    tree = build_tree(count_frequencies(b"aabbbc"))
    # trailing padding would spell extra "a" codes without the symbol count
    assert decode_symbols(tree, bytes([0b01110000, 0b00000001]), 6) == b"aabbbc"


def test_decode_truncated_raises():
    tree = build_tree(count_frequencies(b"aabbbc"))
    with pytest.raises(TruncatedDecodeError):
        decode_symbols(tree, bytes([0b01110000]), 6)


def test_decode_single_leaf_tree():
    tree = build_tree({7: 3})
    assert decode_symbols(tree, b"\x00", 3) == b"\x07\x07\x07"
    with pytest.raises(EOFError):
        decode_symbols(tree, b"", 1)


def test_progress_reaches_total(progress_recorder, sample_text):
    on_prog, calls = progress_recorder
    tree = build_tree(count_frequencies(sample_text))
    packed = encode_symbols(sample_text, build_encoding_table(tree), on_progress=on_prog)
    assert calls[-1] == (len(sample_text), len(sample_text))
    calls.clear()
    decode_symbols(tree, packed, len(sample_text), on_progress=on_prog)
    assert calls[-1] == (len(sample_text), len(sample_text))


def test_node_str_matches_debug_format():
    assert str(HuffmanNode(2, ord("a"))) == "(2, 'a')"
    assert str(HuffmanNode(6)) == "(6, None)"
