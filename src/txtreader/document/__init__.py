"""Document opening, decoding and windowed line access."""

from .errors import ChapterPatternError, DocumentReadError, SearchTermError
from .models import CachedBlock, Chapter, Document, DocumentMode, SearchMatch
from .session import ReaderSession, open_session

__all__ = [
    "CachedBlock",
    "Chapter",
    "ChapterPatternError",
    "Document",
    "DocumentMode",
    "DocumentReadError",
    "ReaderSession",
    "SearchMatch",
    "SearchTermError",
    "open_session",
]
