"""CLI entrypoint for reading a line window of a text document."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

from txtreader.config import ReaderSettings
from txtreader.document.errors import DocumentReadError
from txtreader.document.session import open_session


load_dotenv()

LOGGER = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print a range of lines from a text document as JSON")
    parser.add_argument("--path", required=True, help="Text document path")
    parser.add_argument("--start", type=int, default=0, help="First line (0-based, inclusive)")
    parser.add_argument("--end", type=int, default=None, help="Last line (inclusive); defaults to start + 49")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = ReaderSettings.from_env()
    end = args.end if args.end is not None else args.start + settings.buffer_lines - 1

    try:
        session = open_session(args.path, settings)
    except DocumentReadError as exc:
        LOGGER.error("%s", exc)
        return 2

    lines = session.get_range(args.start, end)
    start = max(0, args.start)
    payload = {
        "path": str(session.path),
        "mode": session.document.mode.value,
        "encoding": session.document.encoding.name,
        "total_lines": session.total_lines,
        "start_line": start,
        "end_line": start + len(lines) - 1 if lines else start,
        "lines": lines,
    }
    session.close()
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
