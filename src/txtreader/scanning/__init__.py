"""Background chapter scanning and text search."""

from .chapters import compile_chapter_pattern, scan_chapters, scan_chapters_in_memory
from .search import search_in_memory, search_lines, validate_search_term
from .supervisor import TaskSupervisor

__all__ = [
    "TaskSupervisor",
    "compile_chapter_pattern",
    "scan_chapters",
    "scan_chapters_in_memory",
    "search_in_memory",
    "search_lines",
    "validate_search_term",
]
