from __future__ import annotations

import pytest

from dirprint.errors import PatternParseError
from dirprint.ignore import compile_pattern, matches


@pytest.mark.parametrize("line", ["", "   ", "\t", "# comment", "#"])
def test_blank_and_comment_lines_produce_no_rule(line: str) -> None:
    assert compile_pattern(line) is None


def test_flags_are_parsed_once_at_compile_time() -> None:
    rule = compile_pattern("!/build/", source="file", line=3)

    assert rule is not None
    assert rule.negated is True
    assert rule.anchored is True
    assert rule.directory_only is True
    assert rule.source == "file"
    assert rule.line == 3
    assert rule.pattern == "!/build/"


def test_inner_slash_anchors_pattern() -> None:
    rule = compile_pattern("docs/api")
    assert rule is not None
    assert rule.anchored is True
    assert rule.directory_only is False


def test_leading_double_star_is_not_anchored() -> None:
    rule = compile_pattern("**/keep.txt")
    assert rule is not None
    assert rule.anchored is False


def test_name_pattern_is_not_anchored() -> None:
    rule = compile_pattern("*.log")
    assert rule is not None
    assert rule.anchored is False
    assert rule.negated is False


def test_escaped_hash_and_bang_are_literal() -> None:
    hashed = compile_pattern("\\#notes")
    banged = compile_pattern("\\!important")

    assert hashed is not None and hashed.negated is False
    assert matches(hashed, "#notes", False)
    assert banged is not None and banged.negated is False
    assert matches(banged, "!important", False)


def test_trailing_whitespace_is_stripped_unless_escaped() -> None:
    plain = compile_pattern("foo.txt   ")
    escaped = compile_pattern("foo\\ ")

    assert plain is not None
    assert matches(plain, "foo.txt", False)
    assert escaped is not None
    assert matches(escaped, "foo ", False)
    assert not matches(escaped, "foo", False)


@pytest.mark.parametrize(
    ("line", "reason"),
    [
        ("[abc", "Unterminated character class"),
        ("foo\\", "Pattern ends with a dangling escape"),
        ("!", "Pattern is empty"),
        ("/", "Pattern is empty"),
    ],
)
def test_malformed_patterns_raise_parse_error(line: str, reason: str) -> None:
    with pytest.raises(PatternParseError) as error:
        compile_pattern(line, source="file", line=9)

    assert error.value.message == reason
    assert error.value.line == 9


def test_unknown_source_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown rule source"):
        compile_pattern("x", source="nowhere")
