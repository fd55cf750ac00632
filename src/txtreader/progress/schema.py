"""SQLite schema and pragmas for per-document reading state."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas for a small local state database."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create reading state tables if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS reading_state (
            source_path TEXT PRIMARY KEY,
            progress INTEGER NOT NULL DEFAULT 0 CHECK(progress >= 0),
            total_lines INTEGER NOT NULL DEFAULT 0 CHECK(total_lines >= 0),
            chapter_pattern TEXT,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        """
    )
