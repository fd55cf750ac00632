"""Repository for persisted per-document reading state."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import sqlite3
import threading

from txtreader.progress.schema import apply_runtime_pragmas, ensure_schema


@dataclass(frozen=True, slots=True)
class ReadingState:
    source_path: str
    progress: int
    total_lines: int
    chapter_pattern: str | None = None


def _source_key(path: str | Path) -> str:
    return str(Path(path).resolve())


class ReadingStateRepository:
    """SQLite-backed store for reading position and chapter pattern overrides.

    The connection is shared with the progress tracker's timer thread, so every
    statement runs under one lock.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        with self._lock:
            self._connection.close()

    def __enter__(self) -> "ReadingStateRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def load(self, path: str | Path) -> ReadingState | None:
        with self._lock:
            row = self._connection.execute(
                """
                SELECT source_path, progress, total_lines, chapter_pattern
                FROM reading_state
                WHERE source_path = ?
                """,
                (_source_key(path),),
            ).fetchone()
        if row is None:
            return None
        return ReadingState(
            source_path=row["source_path"],
            progress=int(row["progress"]),
            total_lines=int(row["total_lines"]),
            chapter_pattern=row["chapter_pattern"],
        )

    def save_progress(self, path: str | Path, line: int, total_lines: int) -> None:
        if line < 0:
            raise ValueError("line cannot be negative")
        if total_lines < 0:
            raise ValueError("total_lines cannot be negative")

        with self._lock, self._connection:
            self._connection.execute(
                """
                INSERT INTO reading_state (source_path, progress, total_lines)
                VALUES (?, ?, ?)
                ON CONFLICT(source_path) DO UPDATE SET
                    progress = excluded.progress,
                    total_lines = excluded.total_lines,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (_source_key(path), line, total_lines),
            )

    def set_chapter_pattern(self, path: str | Path, pattern: str | None) -> None:
        """Store a per-document chapter pattern override; ``None`` clears it."""

        normalized = pattern.strip() if pattern is not None else None
        with self._lock, self._connection:
            self._connection.execute(
                """
                INSERT INTO reading_state (source_path, chapter_pattern)
                VALUES (?, ?)
                ON CONFLICT(source_path) DO UPDATE SET
                    chapter_pattern = excluded.chapter_pattern,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (_source_key(path), normalized or None),
            )
