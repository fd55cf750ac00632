"""Domain errors raised by document reading and scanning."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class DocumentReadError(Exception):
    """The document could not be stat'ed or read."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.message} (path={self.path})"


class ChapterPatternError(ValueError):
    """A chapter pattern failed to compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid chapter pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class SearchTermError(ValueError):
    """A search term was rejected before scanning."""
