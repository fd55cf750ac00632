"""Chapter detection over streamed or materialized documents."""

from __future__ import annotations

import re
from pathlib import Path
from typing import AsyncIterator, Iterable

from txtreader.document.decoding import TextEncoding
from txtreader.document.errors import ChapterPatternError
from txtreader.document.models import Chapter, ScanComplete, ScanProgress
from txtreader.scanning.streaming import iter_line_batches


def compile_chapter_pattern(override: str | None, default: str) -> re.Pattern[str]:
    """Compile the document override when present, else the global default."""

    source = override or default
    try:
        return re.compile(source)
    except re.error as exc:
        raise ChapterPatternError(source, str(exc)) from exc


def match_chapter(line: str, line_no: int, pattern: re.Pattern[str]) -> Chapter | None:
    name = line.strip()
    if pattern.search(name):
        return Chapter(name=name, line=line_no)
    return None


def scan_chapters_in_memory(lines: Iterable[str], pattern: re.Pattern[str]) -> ScanComplete:
    chapters: list[Chapter] = []
    for line_no, line in enumerate(lines):
        chapter = match_chapter(line, line_no, pattern)
        if chapter is not None:
            chapters.append(chapter)
    return ScanComplete(chapters=tuple(chapters))


async def scan_chapters(
    path: str | Path,
    pattern: re.Pattern[str],
    *,
    encoding: TextEncoding,
    total_lines: int,
    chunk_bytes: int,
    progress_every: int = 1000,
) -> AsyncIterator[ScanProgress | ScanComplete]:
    """Stream the document once, yielding progress and finally the chapter list."""

    if progress_every < 1:
        raise ValueError("progress_every must be positive")

    chapters: list[Chapter] = []
    processed = 0
    yield ScanProgress(processed=0, total=total_lines)

    async for first_line, lines in iter_line_batches(path, encoding=encoding, chunk_bytes=chunk_bytes):
        for offset, line in enumerate(lines):
            chapter = match_chapter(line, first_line + offset, pattern)
            if chapter is not None:
                chapters.append(chapter)
            processed += 1
            if processed % progress_every == 0:
                yield ScanProgress(processed=processed, total=total_lines)

    yield ScanComplete(chapters=tuple(chapters))
