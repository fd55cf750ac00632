"""Sparse line-to-byte-offset index built during the line counting pass."""

from __future__ import annotations

from txtreader.document.decoding import LINE_FEED


class SparseLineIndex:
    """Byte offsets of every ``stride``-th line start."""

    def __init__(self, stride: int) -> None:
        if stride < 1:
            raise ValueError("stride must be positive")
        self._stride = stride
        self._offsets: list[int] = [0]

    @property
    def stride(self) -> int:
        return self._stride

    def __len__(self) -> int:
        return len(self._offsets)

    def clear(self) -> None:
        self._offsets = [0]

    def record_chunk(self, chunk: bytes, *, base_offset: int, first_line: int) -> None:
        """Record checkpoints for lines that start inside ``chunk``.

        ``first_line`` is the index of the line that is open when ``chunk``
        begins, so the line after the n-th line feed in the chunk is
        ``first_line + n``.
        """

        line_no = first_line
        position = chunk.find(LINE_FEED)
        while position != -1:
            line_no += 1
            if line_no % self._stride == 0 and line_no // self._stride == len(self._offsets):
                self._offsets.append(base_offset + position + 1)
            position = chunk.find(LINE_FEED, position + 1)

    def checkpoint(self, line: int) -> tuple[int, int]:
        """Return ``(line_no, byte_offset)`` of the closest checkpoint at or before ``line``."""

        if line < 0:
            raise ValueError("line cannot be negative")
        slot = min(line // self._stride, len(self._offsets) - 1)
        return slot * self._stride, self._offsets[slot]

    def offset_for_block(self, key: int) -> int | None:
        if 0 <= key < len(self._offsets):
            return self._offsets[key]
        return None
