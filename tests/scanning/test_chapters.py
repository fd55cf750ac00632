from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from txtreader.config import DEFAULT_CHAPTER_PATTERN, ReaderSettings
from txtreader.document.errors import ChapterPatternError
from txtreader.document.models import Chapter, ScanComplete, ScanProgress
from txtreader.document.session import ReaderSession, open_session
from txtreader.scanning.chapters import compile_chapter_pattern, scan_chapters, scan_chapters_in_memory


CHAPTER_LINES = {0: "Chapter 1 Beginning", 2500: "Chapter 2 Middle", 7000: "Chapter 3 End"}


def _write_book(path: Path, total: int = 10_000) -> None:
    lines = [CHAPTER_LINES.get(idx, f"plain text line {idx}") for idx in range(total)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _collect(session: ReaderSession, pattern_text: str, *, progress_every: int = 1000) -> list[ScanProgress | ScanComplete]:
    async def _scenario() -> list[ScanProgress | ScanComplete]:
        events: list[ScanProgress | ScanComplete] = []
        async for event in scan_chapters(
            session.path,
            compile_chapter_pattern(pattern_text, DEFAULT_CHAPTER_PATTERN),
            encoding=session.document.encoding,
            total_lines=session.total_lines,
            chunk_bytes=session.settings.read_chunk_bytes,
            progress_every=progress_every,
        ):
            events.append(event)
        return events

    return asyncio.run(_scenario())


def test_streamed_scan_reports_chapters_in_order_with_progress(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    _write_book(sample)
    session = open_session(sample, ReaderSettings(large_file_threshold=0, read_chunk_bytes=4096))

    events = _collect(session, r"^Chapter \d+")

    final = events[-1]
    progress = [event for event in events[:-1] if isinstance(event, ScanProgress)]
    assert isinstance(final, ScanComplete)
    assert [chapter.line for chapter in final.chapters] == [0, 2500, 7000]
    assert [chapter.name for chapter in final.chapters] == list(CHAPTER_LINES.values())
    assert progress[0] == ScanProgress(processed=0, total=10_000)
    assert any(0 < event.processed < 10_000 for event in progress)
    assert all(event.total == 10_000 for event in progress)


def test_streamed_and_in_memory_scans_agree(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    _write_book(sample)
    windowed = open_session(sample, ReaderSettings(large_file_threshold=0, read_chunk_bytes=777))
    materialized = open_session(sample, ReaderSettings())

    streamed = _collect(windowed, r"^Chapter \d+")[-1]
    in_memory = scan_chapters_in_memory(
        materialized.document.lines,
        compile_chapter_pattern(r"^Chapter \d+", DEFAULT_CHAPTER_PATTERN),
    )

    assert streamed == in_memory


def test_trailing_fragment_is_tested_and_names_are_trimmed(tmp_path: Path) -> None:
    sample = tmp_path / "book.txt"
    sample.write_text("intro\n   Chapter 1 Start  \nbody\nChapter 2 Tail", encoding="utf-8")
    windowed = open_session(sample, ReaderSettings(large_file_threshold=0, read_chunk_bytes=5))

    final = _collect(windowed, r"^Chapter \d+")[-1]

    assert isinstance(final, ScanComplete)
    assert final.chapters == (Chapter(name="Chapter 1 Start", line=1), Chapter(name="Chapter 2 Tail", line=3))


def test_default_pattern_matches_chinese_headings() -> None:
    pattern = compile_chapter_pattern(None, DEFAULT_CHAPTER_PATTERN)
    lines = ["序言", "第1章 出发", "正文", "第十二章 大结局", "第3节 小节", "第章 无编号"]

    result = scan_chapters_in_memory(lines, pattern)

    assert [chapter.line for chapter in result.chapters] == [1, 3, 4]


def test_document_override_wins_over_default() -> None:
    assert compile_chapter_pattern(r"^Part \d+", DEFAULT_CHAPTER_PATTERN).pattern == r"^Part \d+"
    assert compile_chapter_pattern(None, r"^Part \d+").pattern == r"^Part \d+"
    assert compile_chapter_pattern("", r"^Part \d+").pattern == r"^Part \d+"


def test_invalid_pattern_raises_pattern_error() -> None:
    with pytest.raises(ChapterPatternError) as excinfo:
        compile_chapter_pattern("([unclosed", DEFAULT_CHAPTER_PATTERN)

    assert excinfo.value.pattern == "([unclosed"
    assert isinstance(excinfo.value, ValueError)


def test_blank_lines_are_tested_against_the_pattern(tmp_path: Path) -> None:
    lines = ["Chapter 1", "", "body", "", "Chapter 2"]
    pattern = compile_chapter_pattern(r"^(Chapter \d+)?$", DEFAULT_CHAPTER_PATTERN)

    in_memory = scan_chapters_in_memory(lines, pattern)

    sample = tmp_path / "book.txt"
    sample.write_text("\n".join(lines) + "\n", encoding="utf-8")
    windowed = open_session(sample, ReaderSettings(large_file_threshold=0, read_chunk_bytes=7))
    streamed = _collect(windowed, r"^(Chapter \d+)?$")[-1]

    assert [chapter.line for chapter in in_memory.chapters] == [0, 1, 3, 4]
    assert streamed == in_memory
