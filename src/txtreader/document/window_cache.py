"""Least-recently-used block cache serving line windows of large documents."""

from __future__ import annotations

from collections import OrderedDict
import logging
import threading
from typing import BinaryIO

from txtreader.document.decoding import LINE_FEED, detect_stream_encoding
from txtreader.document.line_counter import count_lines
from txtreader.document.line_index import SparseLineIndex
from txtreader.document.models import CachedBlock, Document


logger = logging.getLogger(__name__)


def clamp_range(start: int, end: int, total_lines: int) -> tuple[int, int] | None:
    """Clamp a requested line range; ``None`` means there is nothing to show."""

    start = max(0, start)
    if start >= total_lines:
        return None
    end = min(max(end, start), total_lines - 1)
    return start, end


class WindowCache:
    """Serve ``get_range`` requests from aligned, lazily loaded line blocks.

    Blocks are keyed by ``start_line // block_size``. A miss seeks to the block
    start recorded in the sparse line index and decodes only that block, so a
    reload costs O(block) instead of O(file).
    """

    def __init__(
        self,
        document: Document,
        index: SparseLineIndex,
        *,
        max_blocks: int,
        chunk_bytes: int,
    ) -> None:
        if max_blocks < 1:
            raise ValueError("max_blocks must be positive")
        self._document = document
        self._index = index
        self._block_size = index.stride
        self._max_blocks = max_blocks
        self._chunk_bytes = chunk_bytes
        self._blocks: OrderedDict[int, CachedBlock] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def total_lines(self) -> int:
        return self._document.total_lines

    def cached_keys(self) -> list[int]:
        """Block keys from least to most recently used."""

        with self._lock:
            return list(self._blocks)

    def get_block(self, key: int) -> CachedBlock | None:
        with self._lock:
            return self._blocks.get(key)

    def clear(self) -> None:
        with self._lock:
            self._blocks.clear()

    def get_range(self, start: int, end: int) -> list[str]:
        with self._lock:
            bounds = clamp_range(start, end, self._document.total_lines)
            if bounds is None:
                return []

            blocks = self._cached_blocks(*bounds)
            if blocks is not None:
                logger.debug("Window %d-%d served from cache", *bounds)
                return self._assemble(blocks, *bounds)

            try:
                return self._reload(start, end)
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning(
                    "Failed to read lines %d-%d of %s: %s",
                    bounds[0],
                    bounds[1],
                    self._document.path,
                    exc,
                )
                return []

    def _keys(self, start: int, end: int) -> range:
        return range(start // self._block_size, end // self._block_size + 1)

    def _cached_blocks(self, start: int, end: int) -> dict[int, CachedBlock] | None:
        keys = self._keys(start, end)
        if any(key not in self._blocks for key in keys):
            return None
        for key in keys:
            self._blocks.move_to_end(key)
        return {key: self._blocks[key] for key in keys}

    def _reload(self, start: int, end: int) -> list[str]:
        self._revalidate()
        bounds = clamp_range(start, end, self._document.total_lines)
        if bounds is None:
            return []

        keys = self._keys(*bounds)
        blocks: dict[int, CachedBlock] = {}
        missing: list[int] = []
        for key in keys:
            block = self._blocks.get(key)
            if block is None:
                missing.append(key)
            else:
                self._blocks.move_to_end(key)
                blocks[key] = block

        logger.debug("Window %d-%d missed blocks %s", bounds[0], bounds[1], missing)
        with self._document.path.open("rb") as handle:
            for key in missing:
                block = self._read_block(handle, key)
                if block is None:
                    break
                blocks[key] = block
                self._insert(key, block)

        return self._assemble(blocks, *bounds)

    def _revalidate(self) -> None:
        """Rebuild the index and re-detect the encoding when the file changed."""

        document = self._document
        stat = document.path.stat()
        if stat.st_size == document.size_bytes and stat.st_mtime_ns == document.mtime_ns:
            return

        total_lines = count_lines(document.path, chunk_bytes=self._chunk_bytes, index=self._index)
        encoding = detect_stream_encoding(document.path, chunk_bytes=self._chunk_bytes)
        logger.warning(
            "Document %s changed on disk, total lines %d -> %d, encoding %s",
            document.path,
            document.total_lines,
            total_lines,
            encoding.name,
        )
        document.encoding = encoding
        document.size_bytes = stat.st_size
        document.mtime_ns = stat.st_mtime_ns
        document.total_lines = total_lines
        self._blocks.clear()

    def _read_block(self, handle: BinaryIO, key: int) -> CachedBlock | None:
        offset = self._index.offset_for_block(key)
        first_line = key * self._block_size
        wanted = min(self._block_size, self._document.total_lines - first_line)
        if offset is None or wanted <= 0:
            return None

        handle.seek(offset)
        raw_lines: list[bytes] = []
        remainder = b""
        while len(raw_lines) < wanted:
            chunk = handle.read(self._chunk_bytes)
            if not chunk:
                if remainder:
                    raw_lines.append(remainder)
                break
            parts = (remainder + chunk).split(LINE_FEED)
            remainder = parts.pop()
            raw_lines.extend(parts)

        del raw_lines[wanted:]
        if not raw_lines:
            return None

        encoding = self._document.encoding
        lines = [
            encoding.decode(raw, at_start=offset == 0 and idx == 0)
            for idx, raw in enumerate(raw_lines)
        ]
        return CachedBlock(start_line=first_line, end_line=first_line + len(lines) - 1, lines=lines)

    def _insert(self, key: int, block: CachedBlock) -> None:
        self._blocks[key] = block
        self._blocks.move_to_end(key)
        while len(self._blocks) > self._max_blocks:
            evicted, _ = self._blocks.popitem(last=False)
            logger.debug("Evicted block %d", evicted)

    def _assemble(self, blocks: dict[int, CachedBlock], start: int, end: int) -> list[str]:
        lines: list[str] = []
        for key in self._keys(start, end):
            block = blocks.get(key)
            if block is None:
                break
            lines.extend(block.slice(max(start, block.start_line), min(end, block.end_line)))
        return lines
