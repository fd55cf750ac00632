from __future__ import annotations

from pathlib import Path

import pytest

from txtreader.document.decoding import decode_lines
from txtreader.document.line_counter import count_lines
from txtreader.document.line_index import SparseLineIndex


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (b"", 0),
        (b"\n", 1),
        (b"alpha", 1),
        (b"alpha\nbeta\ngamma", 3),
        (b"alpha\nbeta\ngamma\n", 3),
        (b"alpha\n\n\n", 3),
        (b"a\r\nb\r\n", 2),
    ],
)
def test_count_lines_matches_materialized_split(tmp_path: Path, payload: bytes, expected: int) -> None:
    sample = tmp_path / "sample.txt"
    sample.write_bytes(payload)

    assert count_lines(sample, chunk_bytes=2) == expected
    assert count_lines(sample, chunk_bytes=4096) == expected
    assert len(decode_lines(payload)) == expected


def test_count_lines_builds_sparse_index(tmp_path: Path) -> None:
    sample = tmp_path / "sample.txt"
    lines = [f"line-{idx}" for idx in range(7)]
    sample.write_text("\n".join(lines) + "\n", encoding="utf-8")
    index = SparseLineIndex(stride=3)

    total = count_lines(sample, chunk_bytes=5, index=index)

    raw = sample.read_bytes()
    expected_offsets = [0]
    for line_no in (3, 6):
        expected_offsets.append(raw.index(lines[line_no].encode("utf-8")))

    assert total == 7
    assert [index.offset_for_block(key) for key in range(3)] == expected_offsets
    assert index.checkpoint(5) == (3, expected_offsets[1])
    assert index.checkpoint(100) == (6, expected_offsets[2])


def test_count_lines_rejects_invalid_chunk_size(tmp_path: Path) -> None:
    sample = tmp_path / "sample.txt"
    sample.write_bytes(b"a\n")

    with pytest.raises(ValueError):
        count_lines(sample, chunk_bytes=0)


def test_count_lines_missing_file_raises_os_error(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        count_lines(tmp_path / "missing.txt", chunk_bytes=16)
