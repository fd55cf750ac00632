from __future__ import annotations

import json
from pathlib import Path

import pytest

from txtreader.cli.read_window import main as read_window_main
from txtreader.cli.scan_chapters import main as scan_chapters_main
from txtreader.cli.search_text import main as search_text_main
from txtreader.cli.set_chapter_pattern import main as set_chapter_pattern_main


def _write_book(path: Path) -> None:
    lines = ["第1章 出发"] + [f"正文 {idx}" for idx in range(1, 300)] + ["第2章 归来", "尾声"]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


@pytest.mark.parametrize("threshold_mb", ["5", "0.001"])
def test_read_window_prints_lines_in_both_modes(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    monkeypatch: pytest.MonkeyPatch,
    threshold_mb: str,
) -> None:
    monkeypatch.setenv("TXTREADER_LARGE_FILE_THRESHOLD_MB", threshold_mb)
    book = tmp_path / "book.txt"
    _write_book(book)

    exit_code = read_window_main(["--path", str(book), "--start", "299", "--end", "305"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["mode"] == ("materialized" if threshold_mb == "5" else "windowed")
    assert payload["total_lines"] == 302
    assert payload["lines"] == ["正文 299", "第2章 归来", "尾声"]
    assert (payload["start_line"], payload["end_line"]) == (299, 301)


def test_read_window_missing_file_returns_error_code(tmp_path: Path) -> None:
    assert read_window_main(["--path", str(tmp_path / "missing.txt")]) == 2


def test_search_text_cli_reports_matches(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    _write_book(book)

    exit_code = search_text_main(["--path", str(book), "--query", "正文 29", "--limit", "3"])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["limit"] == 3
    assert payload["total_matches"] == 11
    assert payload["has_more"] is True
    assert [row["line"] for row in payload["results"]] == [29, 290, 291]


def test_search_text_cli_rejects_blank_query(tmp_path: Path) -> None:
    book = tmp_path / "book.txt"
    _write_book(book)

    assert search_text_main(["--path", str(book), "--query", "  "]) == 2


def test_scan_chapters_cli_uses_stored_override(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    _write_book(book)
    db_path = tmp_path / "state.db"

    assert scan_chapters_main(["--path", str(book), "--db-path", str(db_path)]) == 0
    default_payload = json.loads(capsys.readouterr().out)

    assert set_chapter_pattern_main(["--path", str(book), "--pattern", "^尾声$", "--db-path", str(db_path)]) == 0
    stored_payload = json.loads(capsys.readouterr().out)

    assert scan_chapters_main(["--path", str(book), "--db-path", str(db_path)]) == 0
    override_payload = json.loads(capsys.readouterr().out)

    assert default_payload["chapters"] == [
        {"name": "第1章 出发", "line": 0},
        {"name": "第2章 归来", "line": 300},
    ]
    assert stored_payload["chapter_pattern"] == "^尾声$"
    assert override_payload["chapters"] == [{"name": "尾声", "line": 301}]


def test_chapter_pattern_cli_validates_and_clears(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    book = tmp_path / "book.txt"
    _write_book(book)
    db_path = tmp_path / "state.db"

    assert set_chapter_pattern_main(["--path", str(book), "--pattern", "([", "--db-path", str(db_path)]) == 2
    assert scan_chapters_main(["--path", str(book), "--pattern", "([", "--db-path", str(db_path)]) == 2
    capsys.readouterr()

    assert set_chapter_pattern_main(["--path", str(book), "--clear", "--db-path", str(db_path)]) == 0
    payload = json.loads(capsys.readouterr().out)

    assert payload["chapter_pattern"] is None
