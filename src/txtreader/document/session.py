"""Mode selection at open time and the per-document reading session aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from txtreader.config import ReaderSettings
from txtreader.document.decoding import decode_bytes, detect_stream_encoding, split_lines
from txtreader.document.errors import DocumentReadError
from txtreader.document.line_counter import count_lines
from txtreader.document.line_index import SparseLineIndex
from txtreader.document.models import Chapter, Document, DocumentMode
from txtreader.document.window_cache import WindowCache, clamp_range

if TYPE_CHECKING:
    from txtreader.progress.repository import ReadingStateRepository


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ReaderSession:
    """Mutable state owned by one open document."""

    document: Document
    settings: ReaderSettings
    cache: WindowCache | None = None
    current_line: int = 0
    chapters: list[Chapter] = field(default_factory=list)
    chapter_pattern: str | None = None

    @property
    def path(self) -> Path:
        return self.document.path

    @property
    def total_lines(self) -> int:
        return self.document.total_lines

    @property
    def max_line(self) -> int:
        return max(self.document.total_lines - 1, 0)

    @property
    def effective_chapter_pattern(self) -> str:
        return self.chapter_pattern or self.settings.default_chapter_pattern

    def clamp_line(self, line: int) -> int:
        return min(max(line, 0), self.max_line)

    def get_range(self, start: int, end: int) -> list[str]:
        """Return lines ``start..end`` inclusive after clamping to the document."""

        if self.cache is not None:
            return self.cache.get_range(start, end)

        bounds = clamp_range(start, end, self.document.total_lines)
        if bounds is None:
            return []
        return self.document.lines[bounds[0] : bounds[1] + 1]

    def close(self) -> None:
        if self.cache is not None:
            self.cache.clear()


def _open_windowed(source: Path, size: int, mtime_ns: int, settings: ReaderSettings) -> ReaderSession:
    encoding = detect_stream_encoding(source, chunk_bytes=settings.read_chunk_bytes)
    index = SparseLineIndex(settings.block_size)
    total_lines = count_lines(source, chunk_bytes=settings.read_chunk_bytes, index=index)
    document = Document(
        path=source,
        size_bytes=size,
        mtime_ns=mtime_ns,
        mode=DocumentMode.WINDOWED,
        encoding=encoding,
        total_lines=total_lines,
    )
    cache = WindowCache(
        document,
        index,
        max_blocks=settings.max_cached_blocks,
        chunk_bytes=settings.read_chunk_bytes,
    )
    return ReaderSession(document=document, settings=settings, cache=cache)


def _open_materialized(source: Path, size: int, mtime_ns: int, settings: ReaderSettings) -> ReaderSession:
    decoded = decode_bytes(source.read_bytes())
    lines = split_lines(decoded.text)
    document = Document(
        path=source,
        size_bytes=size,
        mtime_ns=mtime_ns,
        mode=DocumentMode.MATERIALIZED,
        encoding=decoded.encoding,
        total_lines=len(lines),
        lines=lines,
    )
    return ReaderSession(document=document, settings=settings)


def open_session(
    path: str | Path,
    settings: ReaderSettings | None = None,
    *,
    repository: ReadingStateRepository | None = None,
) -> ReaderSession:
    """Open a document, choosing materialized or windowed mode by file size."""

    settings = settings or ReaderSettings()
    source = Path(path)

    try:
        stat = source.stat()
    except OSError as exc:
        raise DocumentReadError(source, f"Failed to stat document: {exc}") from exc

    try:
        if stat.st_size > settings.large_file_threshold:
            session = _open_windowed(source, stat.st_size, stat.st_mtime_ns, settings)
        else:
            session = _open_materialized(source, stat.st_size, stat.st_mtime_ns, settings)
    except OSError as exc:
        raise DocumentReadError(source, f"Failed to read document: {exc}") from exc

    document = session.document
    logger.info(
        "Opened %s in %s mode (%d bytes, %d lines, %s)",
        source,
        document.mode.value,
        document.size_bytes,
        document.total_lines,
        document.encoding.name,
    )

    if repository is not None:
        state = repository.load(source)
        if state is not None:
            session.current_line = session.clamp_line(state.progress)
            session.chapter_pattern = state.chapter_pattern

    return session
