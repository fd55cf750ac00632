"""Literal substring search with capped, incrementally reported matches."""

from __future__ import annotations

from pathlib import Path
from typing import AsyncIterator, Iterable

from txtreader.document.decoding import TextEncoding
from txtreader.document.errors import SearchTermError
from txtreader.document.models import SearchBatch, SearchMatch
from txtreader.scanning.streaming import iter_line_batches


DEFAULT_MAX_RESULTS = 1000
DEFAULT_BATCH_EVERY = 10
DEFAULT_BATCH_LIMIT = 100


def validate_search_term(term: str) -> str:
    if not term or not term.strip():
        raise SearchTermError("Search term cannot be empty or whitespace")
    return term


class _MatchAccumulator:
    def __init__(self, term: str, *, max_results: int, batch_limit: int) -> None:
        if max_results < 1:
            raise ValueError("max_results must be positive")
        if batch_limit < 1:
            raise ValueError("batch_limit must be positive")
        self._term = term
        self._max_results = max_results
        self._batch_limit = batch_limit
        self._matches: list[SearchMatch] = []

    @property
    def count(self) -> int:
        return len(self._matches)

    @property
    def capped(self) -> bool:
        return len(self._matches) >= self._max_results

    def offer(self, line_no: int, line: str) -> bool:
        if self._term not in line:
            return False
        self._matches.append(SearchMatch(line=line_no, content=line.strip()))
        return True

    def batch(
        self,
        *,
        processed: int | None = None,
        total: int | None = None,
        final: bool = False,
    ) -> SearchBatch:
        carried = tuple(self._matches[: self._batch_limit])
        return SearchBatch(
            term=self._term,
            matches=carried,
            total_matches=len(self._matches),
            has_more=len(self._matches) > len(carried),
            processed=processed,
            total=total,
            final=final,
            capped=self.capped,
        )


def search_in_memory(
    lines: Iterable[str],
    term: str,
    *,
    max_results: int = DEFAULT_MAX_RESULTS,
    batch_limit: int = DEFAULT_BATCH_LIMIT,
) -> SearchBatch:
    """Search materialized lines synchronously and return one final batch."""

    accumulator = _MatchAccumulator(
        validate_search_term(term),
        max_results=max_results,
        batch_limit=batch_limit,
    )
    for line_no, line in enumerate(lines):
        if accumulator.offer(line_no, line) and accumulator.capped:
            break
    return accumulator.batch(final=True)


async def search_lines(
    path: str | Path,
    term: str,
    *,
    encoding: TextEncoding,
    total_lines: int,
    chunk_bytes: int,
    max_results: int = DEFAULT_MAX_RESULTS,
    batch_every: int = DEFAULT_BATCH_EVERY,
    batch_limit: int = DEFAULT_BATCH_LIMIT,
) -> AsyncIterator[SearchBatch]:
    """Stream the document, yielding a batch every ``batch_every`` matches.

    The stream closes early once ``max_results`` matches are collected; the
    last batch always has ``final=True``.
    """

    if batch_every < 1:
        raise ValueError("batch_every must be positive")
    accumulator = _MatchAccumulator(
        validate_search_term(term),
        max_results=max_results,
        batch_limit=batch_limit,
    )

    processed = 0
    async for first_line, lines in iter_line_batches(path, encoding=encoding, chunk_bytes=chunk_bytes):
        for offset, line in enumerate(lines):
            processed += 1
            if not accumulator.offer(first_line + offset, line):
                continue
            if accumulator.capped:
                yield accumulator.batch(processed=processed, total=total_lines, final=True)
                return
            if accumulator.count % batch_every == 0:
                yield accumulator.batch(processed=processed, total=total_lines)

    yield accumulator.batch(processed=processed, total=total_lines, final=True)
