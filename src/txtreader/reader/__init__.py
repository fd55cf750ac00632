"""Host-facing command and event surface of a reading session."""

from .controller import ReaderController
from .events import (
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

__all__ = [
    "ChapterScanComplete",
    "ChapterScanProgress",
    "ChaptersUpdate",
    "ChunkUpdate",
    "InitialContent",
    "Notice",
    "ReaderController",
    "ReaderEvent",
    "ScrollUpdate",
    "SearchResults",
]
