"""Compilation and matching of single gitignore-style rules.

Glob translation is delegated to pathspec's gitignore pattern; this module keeps the
parsed flags alongside the compiled expression.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from pathspec.patterns.gitignore import GitIgnorePatternError
from pathspec.patterns.gitignore.spec import GitIgnoreSpecPattern

from dirprint.errors import PatternParseError

RULE_SOURCES: Final[tuple[str, ...]] = ("default", "file", "extra")


@dataclass(slots=True, frozen=True)
class Rule:
    """One compiled ignore directive."""

    pattern: str
    negated: bool
    directory_only: bool
    anchored: bool
    source: str = "extra"
    line: int | None = None
    regex: re.Pattern[str] = field(default=re.compile(""), compare=False, repr=False)
    segments: tuple[re.Pattern[str] | None, ...] = field(
        default=(), compare=False, repr=False
    )


def compile_pattern(text: str, source: str = "extra", line: int | None = None) -> Rule | None:
    """Compile one ignore-file line into a Rule.

    Blank lines and comments produce None. Malformed patterns raise PatternParseError;
    the caller decides whether that is fatal.
    """
    if source not in RULE_SOURCES:
        raise ValueError(f"Unknown rule source: {source}")
    raw = _strip_trailing_whitespace(text.rstrip("\r\n"))
    if not raw or raw.startswith("#"):
        return None

    body = raw[1:] if raw.startswith("!") else raw
    directory_only = body.endswith("/")
    body = body.rstrip("/")
    anchored = body.startswith("/") or ("/" in body and not body.startswith("**/"))
    body = body.lstrip("/")
    if not body:
        raise PatternParseError("Pattern is empty", pattern=raw, line=line)

    try:
        compiled = GitIgnoreSpecPattern(raw)
    except GitIgnorePatternError as error:
        raise PatternParseError(
            "Pattern ends with a dangling escape", pattern=raw, line=line
        ) from error
    if compiled.include is None or compiled.regex is None:
        # pathspec discards lines whose bracket expression never closes.
        raise PatternParseError("Unterminated character class", pattern=raw, line=line)

    return Rule(
        pattern=raw,
        negated=not compiled.include,
        directory_only=directory_only,
        anchored=anchored,
        source=source,
        line=line,
        regex=_dotall(compiled.regex),
        segments=tuple(_segment_regex(part) for part in body.split("/")),
    )


def matches(rule: Rule, relative_path: str, is_directory: bool) -> bool:
    """Return True when the rule applies to the path or to one of its ancestor directories."""
    candidate = relative_path.strip("/")
    if is_directory:
        candidate += "/"
    return rule.regex.search(candidate) is not None


def could_match_beneath(rule: Rule, directory: str) -> bool:
    """Return True when an anchored rule's literal prefix reaches strictly inside directory.

    Unanchored rules never reopen a directory: a bare name such as ``!README.md`` only
    re-includes files in directories that are already walked.
    """
    if not rule.anchored:
        return False
    parts = [part for part in directory.split("/") if part]
    for index, part in enumerate(parts):
        if index >= len(rule.segments):
            return False
        segment = rule.segments[index]
        if segment is None:
            return True
        if segment.search(part) is None:
            return False
    return len(rule.segments) > len(parts)


def _segment_regex(part: str) -> re.Pattern[str] | None:
    """Compile one path component, or None for components that match any depth."""
    if not part or part == "**":
        return None
    compiled = GitIgnoreSpecPattern(f"/{part}")
    if compiled.regex is None:
        return None
    return _dotall(compiled.regex)


def _dotall(regex: re.Pattern[str]) -> re.Pattern[str]:
    # Newlines are legal in POSIX file names.
    return re.compile(regex.pattern, re.DOTALL)


def _strip_trailing_whitespace(text: str) -> str:
    stripped = text.rstrip(" \t")
    if len(stripped) < len(text) and _ends_with_escape(stripped):
        return text[: len(stripped) + 1]
    return stripped


def _ends_with_escape(text: str) -> bool:
    count = len(text) - len(text.rstrip("\\"))
    return count % 2 == 1
