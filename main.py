import argparse
import sys

from typing import List, Optional
from codec import HuffmanCodec
from errors import HuffmanError


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Static Huffman compressor for single files"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    compress = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    compress.add_argument("input", help="File to compress")
    compress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    compress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    decompress = subparsers.add_parser(
        "decompress", aliases=["d"], help="Restore a compressed file"
    )
    decompress.add_argument("input", help="Compressed file")
    decompress.add_argument(
        "-o", "--output", required=True, help="Output file path"
    )
    decompress.add_argument(
        "-P",
        "--no-progress",
        action="store_true",
        help="Hide the progress line",
    )

    inspect = subparsers.add_parser(
        "inspect", aliases=["i"], help="Print the tree of a compressed file"
    )
    inspect.add_argument("input", help="Compressed file")
    inspect.add_argument(
        "--table", action="store_true", help="Also print the code table"
    )

    return parser


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


def _fmt_code(code) -> str:
    return "".join(str(bit) for bit in code)


class FileProgress:
    """Callable progress reporter for one file.

    Redraws the progress line only when the whole-percent value changes.

    :ivar label: Action label (e.g., "Compressing" or "Decompressing").
    :type label: str
    :ivar path: File name shown on the line.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Bytes processed so far.
        :type done: int
        :param total: Total bytes to process.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def compress_file(input_path: str, output_path: str, hide_progress: bool) -> None:
    """Compress ``input_path`` into ``output_path``.

    The output holds the serialized tree followed by the packed payload
    (see :mod:`treecodec`).

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: None
    :rtype: None
    :raises EmptyInputError: If the input file is empty.
    """
    with open(input_path, "rb") as f:
        data = f.read()
    codec = HuffmanCodec.build(data)
    on_prog = None if hide_progress else FileProgress("Compressing", input_path)
    with open(output_path, "wb") as out:
        written = codec.save(out, on_progress=on_prog)
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Size before compression: ", _fmt_bytes(len(data)))
    print("Size after compression: ", _fmt_bytes(written))
    print(f"Payload compression ratio: {codec.compression_ratio():.2f}")


def decompress_file(input_path: str, output_path: str, hide_progress: bool) -> None:
    """Restore the original bytes of a file written by :func:`compress_file`.

    :param input_path: Compressed file.
    :type input_path: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to hide the progress line.
    :type hide_progress: bool
    :returns: None
    :rtype: None
    :raises CorruptStreamError: If the file is not a valid compressed stream.
    """
    on_prog = None if hide_progress else FileProgress("Decompressing", input_path)
    with open(input_path, "rb") as f:
        codec, _ = HuffmanCodec.load(f, on_progress=on_prog)
    with open(output_path, "wb") as out:
        out.write(codec.data)
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()


def inspect_file(input_path: str, show_table: bool) -> None:
    """Print the Huffman tree (and optionally codes) of a compressed file.

    :param input_path: Compressed file.
    :type input_path: str
    :param show_table: Whether to print the code of every symbol.
    :type show_table: bool
    :returns: None
    :rtype: None
    """
    with open(input_path, "rb") as f:
        codec, payload = HuffmanCodec.load(f)
    print(f"Symbols: {codec.tree.symbol_count}, "
          f"distinct: {len(codec.table)}, "
          f"payload: {_fmt_bytes(len(payload))}")
    for line in codec.tree.render():
        print(line)
    if show_table:
        for symbol in sorted(codec.table):
            print(f"{symbol:#04x} {_fmt_code(codec.table[symbol])}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI tool.

    :param argv: Arguments to parse instead of ``sys.argv[1:]``.
    :type argv: Optional[List[str]]
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    try:
        if args.cmd in ["compress", "c"]:
            compress_file(args.input, args.output, args.no_progress)
        elif args.cmd in ["decompress", "d"]:
            decompress_file(args.input, args.output, args.no_progress)
        elif args.cmd in ["inspect", "i"]:
            inspect_file(args.input, args.table)
    except FileNotFoundError as e:
        print(f"[!] File not found: {e.filename}")
        return 1
    except HuffmanError as e:
        print(f"[!] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
