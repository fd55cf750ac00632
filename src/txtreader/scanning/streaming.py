"""Chunked line streaming shared by background scans."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator

from txtreader.document.decoding import LINE_FEED, TextEncoding


async def iter_line_batches(
    path: str | Path,
    *,
    encoding: TextEncoding,
    chunk_bytes: int,
) -> AsyncIterator[tuple[int, list[str]]]:
    """Yield ``(first_line_no, lines)`` for every chunk of completed lines.

    A partial line is carried across chunk boundaries. The trailing fragment is
    yielded last unless it is blank. Reads run in a worker thread, so every
    chunk boundary is an await point where a cancelled consumer stops.
    """

    line_no = 0
    remainder = b""
    handle = await asyncio.to_thread(Path(path).open, "rb")
    with handle:
        while True:
            chunk = await asyncio.to_thread(handle.read, chunk_bytes)
            if not chunk:
                break
            parts = (remainder + chunk).split(LINE_FEED)
            remainder = parts.pop()
            if parts:
                yield line_no, _decode_parts(parts, encoding, line_no)
                line_no += len(parts)

    if remainder.strip():
        yield line_no, _decode_parts([remainder], encoding, line_no)


def _decode_parts(parts: list[bytes], encoding: TextEncoding, first_line: int) -> list[str]:
    return [
        encoding.decode(raw, at_start=first_line == 0 and idx == 0)
        for idx, raw in enumerate(parts)
    ]
