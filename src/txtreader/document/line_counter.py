"""Streaming line counter with bounded memory usage."""

from __future__ import annotations

from pathlib import Path

from txtreader.document.decoding import LINE_FEED
from txtreader.document.line_index import SparseLineIndex


def count_lines(
    path: str | Path,
    *,
    chunk_bytes: int,
    index: SparseLineIndex | None = None,
) -> int:
    """Count line-feed delimited lines; a non-empty trailing fragment counts as one.

    When ``index`` is given it is rebuilt with the start offset of every
    ``index.stride``-th line during the same pass.
    """

    if chunk_bytes < 1:
        raise ValueError("chunk_bytes must be positive")

    source = Path(path)
    line_feeds = 0
    offset = 0
    last_byte = b""
    if index is not None:
        index.clear()

    with source.open("rb") as handle:
        while True:
            chunk = handle.read(chunk_bytes)
            if not chunk:
                break
            if index is not None:
                index.record_chunk(chunk, base_offset=offset, first_line=line_feeds)
            line_feeds += chunk.count(LINE_FEED)
            offset += len(chunk)
            last_byte = chunk[-1:]

    if offset and last_byte != LINE_FEED:
        return line_feeds + 1
    return line_feeds
