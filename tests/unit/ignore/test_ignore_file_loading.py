from __future__ import annotations

from pathlib import Path

import pytest

from dirprint.errors import IgnoreFileReadError, PatternParseError
from dirprint.ignore import load_ignore_set, read_ignore_file


def test_missing_ignore_file_is_not_an_error(tmp_path: Path) -> None:
    assert read_ignore_file(tmp_path) == []
    ignore_set = load_ignore_set(tmp_path, use_default_ignores=False)
    assert ignore_set.rules == ()


def test_lines_keep_file_order_with_line_numbers(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").write_text(
        "# comment\r\n\r\n*.log\r\n!keep.log\r\n", encoding="utf-8"
    )
    ignore_set = load_ignore_set(tmp_path, ["tmp/"], use_default_ignores=False)

    assert [(rule.pattern, rule.line) for rule in ignore_set.rules] == [
        ("*.log", 3),
        ("!keep.log", 4),
        ("tmp/", None),
    ]


def test_byte_order_mark_is_ignored(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").write_bytes(b"\xef\xbb\xbfsecret.txt\n")
    ignore_set = load_ignore_set(tmp_path, use_default_ignores=False)
    assert ignore_set.is_ignored("secret.txt") is True


def test_custom_file_name(tmp_path: Path) -> None:
    (tmp_path / ".deployignore").write_text("out/\n", encoding="utf-8")
    ignore_set = load_ignore_set(tmp_path, file_name=".deployignore", use_default_ignores=False)
    assert ignore_set.is_ignored("out", is_directory=True) is True


def test_unreadable_ignore_file_raises(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").mkdir()
    with pytest.raises(IgnoreFileReadError) as error:
        load_ignore_set(tmp_path)
    assert error.value.path == str(tmp_path / ".vercelignore")
    assert error.value.code == "IGNORE_FILE_READ_ERROR"


def test_undecodable_ignore_file_raises(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(IgnoreFileReadError):
        load_ignore_set(tmp_path)


def test_malformed_line_is_skipped_with_warning(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").write_text("[broken\n*.tmp\n", encoding="utf-8")
    ignore_set = load_ignore_set(tmp_path, use_default_ignores=False)

    assert [rule.pattern for rule in ignore_set.rules] == ["*.tmp"]
    assert len(ignore_set.warnings) == 1
    warning = ignore_set.warnings[0]
    assert (warning.pattern, warning.source, warning.line) == ("[broken", "file", 1)
    assert warning.message() == (
        "Skipped ignore pattern '[broken' (file:1): Unterminated character class."
    )


def test_strict_policy_rejects_malformed_line(tmp_path: Path) -> None:
    (tmp_path / ".vercelignore").write_text("ok\n[broken\n", encoding="utf-8")
    with pytest.raises(PatternParseError) as error:
        load_ignore_set(tmp_path, strict_patterns=True)
    assert error.value.line == 2
    assert error.value.pattern == "[broken"
    assert error.value.path == str(tmp_path / ".vercelignore")
