import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def no_progress(monkeypatch, m):
    """Suppress progress rendering in main module during tests."""
    calls = []

    def _stub(line: str):
        calls.append(line)

    monkeypatch.setattr(m, "_print_progress", _stub)
    return calls


@pytest.fixture()
def progress_recorder():
    """Provide a reusable progress callback and its call log."""
    calls = []

    def cb(done, total):
        calls.append((done, total))

    return cb, calls


@pytest.fixture()
def sample_text():
    """Mixed text with a skewed byte distribution."""
    return (b"The quick brown fox jumps over the lazy dog. " * 200
            + b"\x00\x00\xff\n")


@pytest.fixture()
def input_file(tmp_path: Path, sample_text):
    """Write ``sample_text`` to a file and return its path."""
    path = tmp_path / "input.txt"
    path.write_bytes(sample_text)
    return path
