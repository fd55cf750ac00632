"""Runtime configuration for document reading sessions."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


BYTES_PER_MB = 1024 * 1024
DEFAULT_LARGE_FILE_THRESHOLD_MB = 5
DEFAULT_BLOCK_SIZE = 200
DEFAULT_BUFFER_LINES = 50
DEFAULT_SCROLL_STEP = 3
DEFAULT_CHAPTER_PATTERN = r"^第[0-9一二三四五六七八九十百千]+[章节]\s+.+$"
DEFAULT_STATE_DB_PATH = ".txtreader-state.db"
MAX_SEARCH_RESULTS = 1000
MAX_CACHED_BLOCKS = 10
READ_CHUNK_BYTES = 64 * 1024
PROGRESS_DEBOUNCE_SECONDS = 2.0
SCAN_PROGRESS_EVERY = 1000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw_value!r}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_bool(*, name: str, raw_value: str) -> bool:
    lowered = raw_value.casefold()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag")


@dataclass(frozen=True, slots=True)
class ReaderSettings:
    """Validated reader settings shared by all components of a session."""

    large_file_threshold: int = DEFAULT_LARGE_FILE_THRESHOLD_MB * BYTES_PER_MB
    block_size: int = DEFAULT_BLOCK_SIZE
    buffer_lines: int = DEFAULT_BUFFER_LINES
    scroll_step: int = DEFAULT_SCROLL_STEP
    default_chapter_pattern: str = DEFAULT_CHAPTER_PATTERN
    enable_virtual_scroll: bool = True
    state_db_path: Path = Path(DEFAULT_STATE_DB_PATH)
    max_search_results: int = MAX_SEARCH_RESULTS
    max_cached_blocks: int = MAX_CACHED_BLOCKS
    read_chunk_bytes: int = READ_CHUNK_BYTES
    progress_debounce_seconds: float = PROGRESS_DEBOUNCE_SECONDS
    scan_progress_every: int = SCAN_PROGRESS_EVERY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReaderSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        threshold_raw = source.get(
            "TXTREADER_LARGE_FILE_THRESHOLD_MB", str(DEFAULT_LARGE_FILE_THRESHOLD_MB)
        ).strip()
        block_size_raw = source.get("TXTREADER_CHUNK_SIZE", str(DEFAULT_BLOCK_SIZE)).strip()
        buffer_lines_raw = source.get("TXTREADER_BUFFER_LINES", str(DEFAULT_BUFFER_LINES)).strip()
        scroll_step_raw = source.get("TXTREADER_SCROLL_STEP", str(DEFAULT_SCROLL_STEP)).strip()
        pattern_raw = source.get("TXTREADER_DEFAULT_CHAPTER_PATTERN", DEFAULT_CHAPTER_PATTERN).strip()
        virtual_scroll_raw = source.get("TXTREADER_ENABLE_VIRTUAL_SCROLL", "true").strip()
        db_path_raw = source.get("TXTREADER_STATE_DB_PATH", DEFAULT_STATE_DB_PATH).strip()

        if not threshold_raw:
            raise ValueError("TXTREADER_LARGE_FILE_THRESHOLD_MB cannot be empty")
        if not block_size_raw:
            raise ValueError("TXTREADER_CHUNK_SIZE cannot be empty")
        if not buffer_lines_raw:
            raise ValueError("TXTREADER_BUFFER_LINES cannot be empty")
        if not scroll_step_raw:
            raise ValueError("TXTREADER_SCROLL_STEP cannot be empty")
        if not pattern_raw:
            raise ValueError("TXTREADER_DEFAULT_CHAPTER_PATTERN cannot be empty")
        if not db_path_raw:
            raise ValueError("TXTREADER_STATE_DB_PATH cannot be empty")

        threshold_mb = _parse_positive_float(
            name="TXTREADER_LARGE_FILE_THRESHOLD_MB",
            raw_value=threshold_raw,
        )
        block_size = _parse_positive_int(
            name="TXTREADER_CHUNK_SIZE",
            raw_value=block_size_raw,
            minimum=1,
        )
        buffer_lines = _parse_positive_int(
            name="TXTREADER_BUFFER_LINES",
            raw_value=buffer_lines_raw,
            minimum=1,
        )
        scroll_step = _parse_positive_int(
            name="TXTREADER_SCROLL_STEP",
            raw_value=scroll_step_raw,
            minimum=1,
        )
        enable_virtual_scroll = _parse_bool(
            name="TXTREADER_ENABLE_VIRTUAL_SCROLL",
            raw_value=virtual_scroll_raw,
        )

        return cls(
            large_file_threshold=int(threshold_mb * BYTES_PER_MB),
            block_size=block_size,
            buffer_lines=buffer_lines,
            scroll_step=scroll_step,
            default_chapter_pattern=pattern_raw,
            enable_virtual_scroll=enable_virtual_scroll,
            state_db_path=Path(db_path_raw),
        )
