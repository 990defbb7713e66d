def test_cli_parser_accepts_subcommands(m):
    parser = m.get_parser()
    ns = parser.parse_args(["compress", "in.txt", "-o", "out.huf"])
    assert ns.cmd in ("compress", "c")
    ns2 = parser.parse_args(["d", "out.huf", "-o", "in.txt", "-P"])
    assert ns2.cmd in ("decompress", "d") and ns2.no_progress
    ns3 = parser.parse_args(["inspect", "out.huf", "--table"])
    assert ns3.cmd in ("inspect", "i") and ns3.table


def test_fmt_pct_and_bytes(m):
    assert m._fmt_pct(0, 0) == "0%"
    assert m._fmt_pct(50, 100).strip().endswith("%")
    assert m._fmt_pct(10, 10).strip().startswith("100")

    assert m._fmt_bytes(0) == "0.00 B"
    assert m._fmt_bytes(1024).endswith("KiB")


def test_file_progress_calls_bucketed(no_progress, m):
    p = m.FileProgress("Compressing", "x.txt")
    p(0, 100)
    p(0, 100)
    p(10, 100)
    p(10, 100)
    p(19, 100)
    p(0, 0)
    assert len(no_progress) == 3
    assert all("x.txt" in line for line in no_progress)


def test_compress_decompress_roundtrip(tmp_path, input_file, sample_text, no_progress, m, capsys):
    packed = tmp_path / "out.huf"
    restored = tmp_path / "restored.txt"
    assert m.main(["compress", str(input_file), "-o", str(packed)]) == 0
    assert packed.exists() and packed.stat().st_size < len(sample_text)
    assert "Size after compression" in capsys.readouterr().out

    assert m.main(["decompress", str(packed), "-o", str(restored)]) == 0
    assert restored.read_bytes() == sample_text
    assert no_progress


def test_inspect_prints_tree_and_table(tmp_path, input_file, m, capsys):
    packed = tmp_path / "out.huf"
    m.main(["c", str(input_file), "-o", str(packed), "-P"])
    capsys.readouterr()
    assert m.main(["i", str(packed), "--table"]) == 0
    out = capsys.readouterr().out
    assert "distinct: " in out
    assert "0x00 " in out
    assert "L-" in out and "R-" in out


def test_empty_input_reports_error(tmp_path, m, capsys):
    empty = tmp_path / "empty.bin"
    empty.write_bytes(b"")
    assert m.main(["c", str(empty), "-o", str(tmp_path / "x.huf"), "-P"]) == 1
    assert "[!]" in capsys.readouterr().out


def test_corrupt_and_missing_files_report_error(tmp_path, m, capsys):
    bad = tmp_path / "bad.huf"
    bad.write_bytes(b"\xff" * 8)
    assert m.main(["d", str(bad), "-o", str(tmp_path / "out"), "-P"]) == 1
    assert m.main(["i", str(tmp_path / "missing.huf")]) == 1
    out = capsys.readouterr().out
    assert out.count("[!]") == 2
    assert "File not found" in out
