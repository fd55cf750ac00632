"""CLI entrypoint for literal text search inside one document."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from txtreader.config import ReaderSettings
from txtreader.document.errors import DocumentReadError, SearchTermError
from txtreader.document.models import SearchBatch
from txtreader.document.session import ReaderSession, open_session
from txtreader.scanning.search import search_in_memory, search_lines


load_dotenv()

LOGGER = logging.getLogger(__name__)


async def _search(session: ReaderSession, query: str, limit: int) -> SearchBatch:
    if not session.document.is_windowed:
        return search_in_memory(
            session.document.lines,
            query,
            max_results=session.settings.max_search_results,
            batch_limit=limit,
        )

    final: SearchBatch | None = None
    async for batch in search_lines(
        session.path,
        query,
        encoding=session.document.encoding,
        total_lines=session.total_lines,
        chunk_bytes=session.settings.read_chunk_bytes,
        max_results=session.settings.max_search_results,
        batch_limit=limit,
    ):
        final = batch
    assert final is not None
    return final


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Find lines containing a literal substring")
    parser.add_argument("--path", required=True, help="Text document path")
    parser.add_argument("--query", required=True, help="Literal text to search for")
    parser.add_argument("--limit", type=int, default=100, help="Maximum number of matches to print")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = ReaderSettings.from_env()
    safe_limit = max(1, min(args.limit, settings.max_search_results))

    try:
        session = open_session(args.path, settings)
        batch = asyncio.run(_search(session, args.query, safe_limit))
    except DocumentReadError as exc:
        LOGGER.error("%s", exc)
        return 2
    except SearchTermError as exc:
        LOGGER.error("%s", exc)
        return 2

    payload = {
        "path": str(session.path),
        "query": args.query,
        "limit": safe_limit,
        "total_matches": batch.total_matches,
        "has_more": batch.has_more,
        "capped": batch.capped,
        "results": [match.to_dict() for match in batch.matches],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
