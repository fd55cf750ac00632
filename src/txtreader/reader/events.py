"""Events sent from a reading session to the presentation layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from txtreader.document.models import Chapter, SearchBatch, SearchMatch


@dataclass(frozen=True, slots=True)
class InitialContent:
    lines: tuple[str, ...]
    start_line: int
    end_line: int
    current_line: int
    total_lines: int
    use_virtual_scroll: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "initContent",
            "lines": list(self.lines),
            "start_line": self.start_line,
            "end_line": self.end_line,
            "current_line": self.current_line,
            "total_lines": self.total_lines,
            "use_virtual_scroll": self.use_virtual_scroll,
        }


@dataclass(frozen=True, slots=True)
class ChunkUpdate:
    start_line: int
    end_line: int
    lines: tuple[str, ...]
    total_lines: int
    is_jump: bool = False
    target_line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "updateChunk",
            "start_line": self.start_line,
            "end_line": self.end_line,
            "lines": list(self.lines),
            "total_lines": self.total_lines,
            "is_jump": self.is_jump,
            "target_line": self.target_line,
        }


@dataclass(frozen=True, slots=True)
class ScrollUpdate:
    current_line: int

    def to_dict(self) -> dict[str, Any]:
        return {"command": "updateScroll", "current_line": self.current_line}


@dataclass(frozen=True, slots=True)
class ChaptersUpdate:
    chapters: tuple[Chapter, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "updateChapters",
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


@dataclass(frozen=True, slots=True)
class ChapterScanProgress:
    processed: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {"command": "chapterScanProgress", "progress": self.processed, "total": self.total}


@dataclass(frozen=True, slots=True)
class ChapterScanComplete:
    chapters: tuple[Chapter, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "chapterScanComplete",
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


@dataclass(frozen=True, slots=True)
class SearchResults:
    term: str
    results: tuple[SearchMatch, ...]
    has_more: bool
    total_matches: int
    final: bool
    capped: bool = False
    progress: int | None = None
    total: int | None = None

    @classmethod
    def from_batch(cls, batch: SearchBatch) -> "SearchResults":
        return cls(
            term=batch.term,
            results=batch.matches,
            has_more=batch.has_more,
            total_matches=batch.total_matches,
            final=batch.final,
            capped=batch.capped,
            progress=batch.processed,
            total=batch.total,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "command": "searchResults",
            "search_term": self.term,
            "results": [match.to_dict() for match in self.results],
            "has_more": self.has_more,
            "total_results": self.total_matches,
            "final": self.final,
            "capped": self.capped,
            "progress": self.progress,
            "total": self.total,
        }


@dataclass(frozen=True, slots=True)
class Notice:
    """User-facing message: ``info``, ``warning`` or ``error``."""

    level: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"command": "notice", "level": self.level, "message": self.message}


ReaderEvent = (
    InitialContent
    | ChunkUpdate
    | ScrollUpdate
    | ChaptersUpdate
    | ChapterScanProgress
    | ChapterScanComplete
    | SearchResults
    | Notice
)
