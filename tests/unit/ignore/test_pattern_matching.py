from __future__ import annotations

import pytest

from dirprint.ignore import compile_pattern, could_match_beneath, matches
from dirprint.ignore.patterns import Rule


def _rule(text: str) -> Rule:
    rule = compile_pattern(text)
    assert rule is not None
    return rule


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("*.log", "debug.log", True),
        ("*.log", "logs/deep/debug.log", True),
        ("*.log", "debug.log.txt", False),
        ("doc/*.txt", "doc/notes.txt", True),
        ("doc/*.txt", "doc/server/arch.txt", False),
        ("a?c", "abc", True),
        ("a?c", "a/c", False),
        ("**/foo", "foo", True),
        ("**/foo", "x/y/foo", True),
        ("a/**/b", "a/b", True),
        ("a/**/b", "a/x/y/b", True),
        ("a/**/b", "c/a/b", False),
        ("logs/**", "logs/2024/app.log", True),
        ("[abc].txt", "b.txt", True),
        ("[abc].txt", "d.txt", False),
        ("[!abc].txt", "d.txt", True),
        ("[a-c]x", "bx", True),
        ("[a-c]x", "dx", False),
        ("Secrets.env", "secrets.env", False),
    ],
)
def test_glob_semantics(pattern: str, path: str, expected: bool) -> None:
    assert matches(_rule(pattern), path, is_directory=False) is expected


def test_leading_slash_anchors_to_root() -> None:
    rule = _rule("/secrets.env")
    assert matches(rule, "secrets.env", False) is True
    assert matches(rule, "nested/secrets.env", False) is False


def test_unanchored_name_matches_at_any_depth() -> None:
    rule = _rule("secrets.env")
    assert matches(rule, "secrets.env", False) is True
    assert matches(rule, "nested/secrets.env", False) is True


def test_directory_only_rule_skips_files_with_same_name() -> None:
    rule = _rule("build/")
    assert matches(rule, "build", is_directory=True) is True
    assert matches(rule, "build", is_directory=False) is False
    assert matches(rule, "src/build", is_directory=True) is True


def test_directory_match_covers_everything_beneath() -> None:
    rule = _rule("build/")
    assert matches(rule, "build/out/app.js", is_directory=False) is True
    assert matches(rule, "build.txt", is_directory=False) is False


def test_could_match_beneath_follows_literal_prefix() -> None:
    assert could_match_beneath(_rule("!build/keep.txt"), "build") is True
    assert could_match_beneath(_rule("!build/keep.txt"), "dist") is False
    assert could_match_beneath(_rule("!build/keep.txt"), "build/keep.txt") is False
    assert could_match_beneath(_rule("!build/**/keep.txt"), "build/a/b") is True


def test_unanchored_negation_never_reaches_beneath() -> None:
    assert could_match_beneath(_rule("!keep.txt"), "vendor") is False
    assert could_match_beneath(_rule("!**/keep.txt"), "anything/at/all") is False


def test_newlines_in_names_are_matched() -> None:
    assert matches(_rule("secrets.env"), "we\nird/secrets.env", False) is True
    assert matches(_rule("logs/**"), "logs/a\nb.log", False) is True
    assert matches(_rule("*.tmp"), "line\nbreak.tmp", False) is True
