from __future__ import annotations

from pathlib import Path

import pytest

from txtreader.config import ReaderSettings
from txtreader.document.errors import DocumentReadError
from txtreader.document.models import DocumentMode
from txtreader.document.session import open_session
from txtreader.progress.repository import ReadingStateRepository


def test_small_document_is_materialized(tmp_path: Path) -> None:
    sample = tmp_path / "short.txt"
    sample.write_text("alpha\nbeta\ngamma", encoding="utf-8")

    session = open_session(sample, ReaderSettings())

    assert session.document.mode is DocumentMode.MATERIALIZED
    assert session.cache is None
    assert session.total_lines == 3
    assert session.get_range(0, 1) == ["alpha", "beta"]


def test_document_above_threshold_is_windowed(tmp_path: Path) -> None:
    sample = tmp_path / "long.txt"
    sample.write_text("x" * 100 + "\n", encoding="utf-8")

    session = open_session(sample, ReaderSettings(large_file_threshold=50))

    assert session.document.mode is DocumentMode.WINDOWED
    assert session.cache is not None
    assert session.document.lines == []
    assert session.total_lines == 1


def test_empty_document_has_no_lines(tmp_path: Path) -> None:
    sample = tmp_path / "empty.txt"
    sample.write_bytes(b"")

    session = open_session(sample, ReaderSettings(large_file_threshold=0))

    assert session.document.mode is DocumentMode.MATERIALIZED
    assert session.total_lines == 0
    assert session.get_range(0, 10) == []
    assert session.max_line == 0


def test_missing_document_raises_read_error(tmp_path: Path) -> None:
    with pytest.raises(DocumentReadError) as excinfo:
        open_session(tmp_path / "missing.txt", ReaderSettings())

    assert "missing.txt" in str(excinfo.value)


def test_open_restores_persisted_state(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    sample.write_text("\n".join(f"line {idx}" for idx in range(20)), encoding="utf-8")

    with ReadingStateRepository(tmp_path / "state.db") as repository:
        repository.save_progress(sample, 12, 20)
        repository.set_chapter_pattern(sample, r"^line 1\d$")

        session = open_session(sample, ReaderSettings(), repository=repository)

    assert session.current_line == 12
    assert session.chapter_pattern == r"^line 1\d$"
    assert session.effective_chapter_pattern == r"^line 1\d$"


def test_open_clamps_persisted_progress_beyond_document(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    sample.write_text("one\ntwo\nthree\n", encoding="utf-8")

    with ReadingStateRepository(tmp_path / "state.db") as repository:
        repository.save_progress(sample, 500, 1000)
        session = open_session(sample, ReaderSettings(), repository=repository)

    assert session.current_line == 2
    assert session.effective_chapter_pattern == ReaderSettings().default_chapter_pattern
