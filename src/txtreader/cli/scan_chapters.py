"""CLI entrypoint for detecting chapters in a text document."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging

from dotenv import load_dotenv

from txtreader.config import ReaderSettings
from txtreader.document.errors import ChapterPatternError, DocumentReadError
from txtreader.document.models import ScanComplete
from txtreader.document.session import ReaderSession, open_session
from txtreader.progress.repository import ReadingStateRepository
from txtreader.scanning.chapters import compile_chapter_pattern, scan_chapters, scan_chapters_in_memory


load_dotenv()

LOGGER = logging.getLogger(__name__)


async def _scan(session: ReaderSession, pattern_text: str | None) -> ScanComplete:
    pattern = compile_chapter_pattern(
        pattern_text or session.chapter_pattern,
        session.settings.default_chapter_pattern,
    )
    if not session.document.is_windowed:
        return scan_chapters_in_memory(session.document.lines, pattern)

    result = ScanComplete(chapters=())
    async for event in scan_chapters(
        session.path,
        pattern,
        encoding=session.document.encoding,
        total_lines=session.total_lines,
        chunk_bytes=session.settings.read_chunk_bytes,
        progress_every=session.settings.scan_progress_every,
    ):
        if isinstance(event, ScanComplete):
            result = event
        else:
            LOGGER.info("Scanned %d/%d lines", event.processed, event.total)
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Detect chapter headings in a text document")
    parser.add_argument("--path", required=True, help="Text document path")
    parser.add_argument("--pattern", default=None, help="Chapter regular expression (overrides stored pattern)")
    parser.add_argument("--db-path", default=None, help="Reading state database path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = ReaderSettings.from_env()

    try:
        with ReadingStateRepository(args.db_path or settings.state_db_path) as repository:
            session = open_session(args.path, settings, repository=repository)
        result = asyncio.run(_scan(session, args.pattern))
    except DocumentReadError as exc:
        LOGGER.error("%s", exc)
        return 2
    except ChapterPatternError as exc:
        LOGGER.error("%s", exc)
        return 2

    payload = {
        "path": str(session.path),
        "total_lines": session.total_lines,
        "chapters": [chapter.to_dict() for chapter in result.chapters],
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
