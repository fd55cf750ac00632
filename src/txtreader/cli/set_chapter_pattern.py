"""CLI entrypoint for storing a per-document chapter pattern override."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from txtreader.config import ReaderSettings
from txtreader.document.errors import ChapterPatternError
from txtreader.progress.repository import ReadingStateRepository
from txtreader.scanning.chapters import compile_chapter_pattern


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Set or clear the chapter pattern of one document")
    parser.add_argument("--path", required=True, help="Text document path")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--pattern", help="Chapter regular expression for this document")
    group.add_argument("--clear", action="store_true", help="Remove the stored override")
    parser.add_argument("--db-path", default=None, help="Reading state database path")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = ReaderSettings.from_env()
    source = Path(args.path)
    if not source.is_file():
        LOGGER.error("path must be an existing file: %s", source)
        return 2

    pattern = None if args.clear else args.pattern
    if pattern is not None:
        try:
            compile_chapter_pattern(pattern, settings.default_chapter_pattern)
        except ChapterPatternError as exc:
            LOGGER.error("%s", exc)
            return 2

    with ReadingStateRepository(args.db_path or settings.state_db_path) as repository:
        repository.set_chapter_pattern(source, pattern)
        state = repository.load(source)

    payload = {
        "path": str(source),
        "chapter_pattern": state.chapter_pattern if state is not None else None,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
