"""Command surface of a reading session for the presentation layer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
import re
from typing import Callable

from txtreader.config import ReaderSettings
from txtreader.document.errors import ChapterPatternError, SearchTermError
from txtreader.document.models import ScanComplete, ScanProgress, SearchBatch
from txtreader.document.session import ReaderSession, open_session
from txtreader.progress.repository import ReadingStateRepository
from txtreader.progress.tracker import ProgressTracker
from txtreader.reader.events import (
    ChapterScanComplete,
    ChapterScanProgress,
    ChaptersUpdate,
    ChunkUpdate,
    InitialContent,
    Notice,
    ReaderEvent,
    ScrollUpdate,
    SearchResults,
)
from txtreader.scanning.chapters import compile_chapter_pattern, scan_chapters, scan_chapters_in_memory
from txtreader.scanning.search import search_in_memory, search_lines, validate_search_term
from txtreader.scanning.supervisor import TaskSupervisor


CHAPTER_SCAN_TASK = "chapters"
SEARCH_TASK = "search"

logger = logging.getLogger(__name__)


class ReaderController:
    """Translate reader commands into session operations and outgoing events."""

    def __init__(
        self,
        session: ReaderSession,
        emit: Callable[[ReaderEvent], None],
        *,
        repository: ReadingStateRepository | None = None,
    ) -> None:
        self._session = session
        self._emit = emit
        self._repository = repository
        self._supervisor = TaskSupervisor()
        self._tracker: ProgressTracker | None = None
        if repository is not None:
            self._tracker = ProgressTracker(
                self._persist_progress,
                debounce_seconds=session.settings.progress_debounce_seconds,
            )

    @classmethod
    async def open(
        cls,
        path: str | Path,
        emit: Callable[[ReaderEvent], None],
        *,
        settings: ReaderSettings | None = None,
        repository: ReadingStateRepository | None = None,
        scan_on_open: bool = True,
    ) -> "ReaderController":
        """Open a document off the event loop and kick off the chapter scan."""

        session = await asyncio.to_thread(open_session, path, settings, repository=repository)
        controller = cls(session, emit, repository=repository)
        if scan_on_open:
            controller.start_chapter_scan()
        return controller

    @property
    def session(self) -> ReaderSession:
        return self._session

    @property
    def supervisor(self) -> TaskSupervisor:
        return self._supervisor

    def scroll_up(self) -> None:
        session = self._session
        session.current_line = session.clamp_line(session.current_line - session.settings.scroll_step)
        self._emit(ScrollUpdate(current_line=session.current_line))

    def scroll_down(self) -> None:
        session = self._session
        session.current_line = session.clamp_line(session.current_line + session.settings.scroll_step)
        self._emit(ScrollUpdate(current_line=session.current_line))

    async def jump_to_line(self, line: int) -> bool:
        session = self._session
        if session.total_lines == 0 or not 0 <= line <= session.max_line:
            return False

        session.current_line = line
        if session.document.is_windowed:
            buffer_lines = session.settings.buffer_lines
            start = max(0, line - buffer_lines)
            end = min(session.max_line, line + buffer_lines)
            await self._send_chunk(start, end, target_line=line)
        else:
            self._emit(ScrollUpdate(current_line=line))
        return True

    async def jump_to_chapter(self, index: int) -> bool:
        chapters = self._session.chapters
        if not 0 <= index < len(chapters):
            return False
        return await self.jump_to_line(chapters[index].line)

    async def request_window(self, start: int, end: int) -> None:
        await self._send_chunk(start, end)

    async def request_initial_content(self) -> None:
        session = self._session
        settings = session.settings
        start = max(0, session.current_line - settings.buffer_lines)
        end = min(session.max_line, session.current_line + settings.buffer_lines)

        if session.document.is_windowed:
            lines = await self._read_range(start, end)
            if not lines and session.total_lines:
                self._emit(Notice("warning", "Unable to load document content, check the file encoding"))
            use_virtual_scroll = settings.enable_virtual_scroll
        else:
            lines = list(session.document.lines)
            start = 0
            use_virtual_scroll = False

        self._emit(
            InitialContent(
                lines=tuple(lines),
                start_line=start,
                end_line=start + len(lines) - 1 if lines else start,
                current_line=session.current_line,
                total_lines=session.total_lines,
                use_virtual_scroll=use_virtual_scroll,
            )
        )
        self.request_chapters()

    def request_chapters(self) -> None:
        self._emit(ChaptersUpdate(chapters=tuple(self._session.chapters)))

    def start_chapter_scan(self) -> asyncio.Task[None] | None:
        """Scan chapters, replacing the current list when the scan completes."""

        session = self._session
        try:
            pattern = compile_chapter_pattern(session.chapter_pattern, session.settings.default_chapter_pattern)
        except ChapterPatternError as exc:
            logger.warning("%s", exc)
            self._emit(Notice("error", str(exc)))
            return None

        if not session.document.is_windowed:
            self._apply_chapters(scan_chapters_in_memory(session.document.lines, pattern))
            return None
        return self._supervisor.start(CHAPTER_SCAN_TASK, self._run_chapter_scan(pattern))

    def rescan_chapters(self) -> asyncio.Task[None] | None:
        """Discard the running scan and detect chapters again from the start."""

        self._supervisor.cancel(CHAPTER_SCAN_TASK)
        return self.start_chapter_scan()

    def set_chapter_pattern(self, pattern: str | None) -> asyncio.Task[None] | None:
        """Validate and persist a per-document pattern override, then re-scan."""

        normalized = pattern.strip() if pattern else None
        if normalized:
            compile_chapter_pattern(normalized, self._session.settings.default_chapter_pattern)

        self._session.chapter_pattern = normalized or None
        if self._repository is not None:
            self._repository.set_chapter_pattern(self._session.path, normalized)
        return self.start_chapter_scan()

    def search(self, term: str) -> asyncio.Task[None] | None:
        session = self._session
        try:
            validate_search_term(term)
        except SearchTermError as exc:
            self._emit(Notice("warning", str(exc)))
            return None

        if not session.document.is_windowed:
            self._publish_search(
                search_in_memory(
                    session.document.lines,
                    term,
                    max_results=session.settings.max_search_results,
                )
            )
            return None
        return self._supervisor.start(SEARCH_TASK, self._run_search(term))

    def report_progress(self, line: int) -> None:
        session = self._session
        session.current_line = session.clamp_line(line)
        if self._tracker is not None:
            self._tracker.update(session.current_line)

    async def close(self) -> None:
        await self._supervisor.cancel_all()
        if self._tracker is not None:
            self._tracker.close()
        self._session.close()

    async def _read_range(self, start: int, end: int) -> list[str]:
        if self._session.document.is_windowed:
            return await asyncio.to_thread(self._session.get_range, start, end)
        return self._session.get_range(start, end)

    async def _send_chunk(self, start: int, end: int, *, target_line: int | None = None) -> None:
        start = max(0, start)
        lines = await self._read_range(start, end)
        self._emit(
            ChunkUpdate(
                start_line=start,
                end_line=start + len(lines) - 1 if lines else start,
                lines=tuple(lines),
                total_lines=self._session.total_lines,
                is_jump=target_line is not None,
                target_line=target_line,
            )
        )

    async def _run_chapter_scan(self, pattern: re.Pattern[str]) -> None:
        session = self._session
        try:
            async for event in scan_chapters(
                session.path,
                pattern,
                encoding=session.document.encoding,
                total_lines=session.total_lines,
                chunk_bytes=session.settings.read_chunk_bytes,
                progress_every=session.settings.scan_progress_every,
            ):
                if isinstance(event, ScanProgress):
                    self._emit(ChapterScanProgress(processed=event.processed, total=event.total))
                else:
                    self._apply_chapters(event)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Chapter scan failed for %s: %s", session.path, exc)
            self._emit(Notice("error", f"Chapter scan failed: {exc}"))

    async def _run_search(self, term: str) -> None:
        session = self._session
        try:
            async for batch in search_lines(
                session.path,
                term,
                encoding=session.document.encoding,
                total_lines=session.total_lines,
                chunk_bytes=session.settings.read_chunk_bytes,
                max_results=session.settings.max_search_results,
            ):
                self._publish_search(batch)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Search failed for %s: %s", session.path, exc)
            self._emit(Notice("error", f"Search failed: {exc}"))

    def _apply_chapters(self, complete: ScanComplete) -> None:
        self._session.chapters = list(complete.chapters)
        logger.info("Identified %d chapters in %s", len(complete.chapters), self._session.path)
        self._emit(ChapterScanComplete(chapters=complete.chapters))
        self.request_chapters()

    def _publish_search(self, batch: SearchBatch) -> None:
        self._emit(SearchResults.from_batch(batch))
        if not batch.final:
            return
        if batch.total_matches:
            logger.info(
                "Found %d matches for %r%s",
                batch.total_matches,
                batch.term,
                " (limited)" if batch.capped else "",
            )
        else:
            logger.info("No matches for %r", batch.term)

    def _persist_progress(self, line: int) -> None:
        assert self._repository is not None
        self._repository.save_progress(self._session.path, line, self._session.total_lines)
