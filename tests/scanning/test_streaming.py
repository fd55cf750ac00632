from __future__ import annotations

import asyncio
from pathlib import Path
import threading

import pytest

from txtreader.document.decoding import UTF8, TextEncoding
from txtreader.scanning.streaming import iter_line_batches


def _collect(path: Path, encoding: TextEncoding, chunk_bytes: int) -> list[tuple[int, list[str]]]:
    async def _scenario() -> list[tuple[int, list[str]]]:
        return [batch async for batch in iter_line_batches(path, encoding=encoding, chunk_bytes=chunk_bytes)]

    return asyncio.run(_scenario())


def test_batches_number_lines_across_chunk_boundaries(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    sample.write_text("alpha\nbeta\ngamma\ndelta", encoding="utf-8")

    batches = _collect(sample, TextEncoding(UTF8), chunk_bytes=4)

    flattened = [(first + offset, line) for first, lines in batches for offset, line in enumerate(lines)]
    assert flattened == [(0, "alpha"), (1, "beta"), (2, "gamma"), (3, "delta")]


def test_blank_trailing_fragment_is_not_yielded(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    sample.write_bytes(b"alpha\n\nbeta\n   ")

    batches = _collect(sample, TextEncoding(UTF8), chunk_bytes=64)

    assert [line for _, lines in batches for line in lines] == ["alpha", "", "beta"]


def test_reads_run_off_the_event_loop_thread(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    sample = tmp_path / "book.txt"
    sample.write_text("line\n" * 50, encoding="utf-8")
    reader_threads: set[int] = set()
    original_open = Path.open

    class _RecordingHandle:
        def __init__(self, handle) -> None:
            self._handle = handle

        def read(self, size: int) -> bytes:
            reader_threads.add(threading.get_ident())
            return self._handle.read(size)

        def __enter__(self) -> "_RecordingHandle":
            return self

        def __exit__(self, *exc_info: object) -> None:
            self._handle.close()

    def _open(self: Path, *args: object, **kwargs: object) -> _RecordingHandle:
        return _RecordingHandle(original_open(self, *args, **kwargs))

    monkeypatch.setattr(Path, "open", _open)

    batches = _collect(sample, TextEncoding(UTF8), chunk_bytes=16)

    assert sum(len(lines) for _, lines in batches) == 50
    assert reader_threads
    assert threading.get_ident() not in reader_threads


def test_byte_order_mark_is_dropped_only_at_file_start(tmp_path: Path) -> None:
    sample = tmp_path / "bom.txt"
    sample.write_bytes(b"\xef\xbb\xbffirst\n\xef\xbb\xbfsecond\n")

    batches = _collect(sample, TextEncoding(UTF8, has_bom=True), chunk_bytes=5)

    assert [line for _, lines in batches for line in lines] == ["first", "\ufeffsecond"]
