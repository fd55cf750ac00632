"""Canonical data structures shared by reading, scanning and search."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from txtreader.document.decoding import TextEncoding


class DocumentMode(str, Enum):
    MATERIALIZED = "materialized"
    WINDOWED = "windowed"


@dataclass(slots=True)
class Document:
    """An opened plain-text document and its snapshot attributes."""

    path: Path
    size_bytes: int
    mtime_ns: int
    mode: DocumentMode
    encoding: TextEncoding
    total_lines: int = 0
    lines: list[str] = field(default_factory=list)

    @property
    def is_windowed(self) -> bool:
        return self.mode is DocumentMode.WINDOWED


@dataclass(slots=True)
class CachedBlock:
    """A contiguous decoded slice of lines aligned to a block key."""

    start_line: int
    end_line: int
    lines: list[str]

    def __post_init__(self) -> None:
        if self.start_line > self.end_line:
            raise ValueError("start_line must not exceed end_line")
        if len(self.lines) != self.end_line - self.start_line + 1:
            raise ValueError("lines length must match the block range")

    def covers(self, start: int, end: int) -> bool:
        return self.start_line <= start and end <= self.end_line

    def slice(self, start: int, end: int) -> list[str]:
        return self.lines[start - self.start_line : end - self.start_line + 1]


@dataclass(frozen=True, slots=True)
class Chapter:
    name: str
    line: int

    def to_dict(self) -> dict[str, str | int]:
        return {"name": self.name, "line": self.line}


@dataclass(frozen=True, slots=True)
class SearchMatch:
    line: int
    content: str

    def to_dict(self) -> dict[str, str | int]:
        return {"line": self.line, "content": self.content}


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Intermediate chapter scan progress."""

    processed: int
    total: int


@dataclass(frozen=True, slots=True)
class ScanComplete:
    """Terminal chapter scan event carrying the ordered chapter list."""

    chapters: tuple[Chapter, ...]


@dataclass(frozen=True, slots=True)
class SearchBatch:
    """Incremental or final slice of accumulated search matches."""

    term: str
    matches: tuple[SearchMatch, ...]
    total_matches: int
    has_more: bool
    processed: int | None = None
    total: int | None = None
    final: bool = False
    capped: bool = False
