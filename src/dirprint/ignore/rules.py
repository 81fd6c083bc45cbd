"""Ordered ignore rule sets loaded from an ignore file plus caller rules."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from dirprint.errors import IgnoreFileReadError, PatternParseError
from dirprint.ignore.patterns import Rule, compile_pattern, could_match_beneath, matches

IGNORE_FILE_NAME: Final[str] = ".vercelignore"

DEFAULT_IGNORES: Final[tuple[str, ...]] = (
    ".hg",
    ".git",
    ".gitmodules",
    ".svn",
    ".cache",
    ".next",
    ".now",
    ".vercel",
    ".npmignore",
    ".dockerignore",
    ".gitignore",
    ".*.swp",
    ".DS_Store",
    ".wafpicke-*",
    ".lock-wscript",
    ".env.local",
    ".env.*.local",
    ".venv",
    "npm-debug.log",
    "config.gypi",
    "node_modules",
    "__pycache__",
    "venv",
    "CVS",
)


@dataclass(slots=True, frozen=True)
class PatternWarning:
    """A pattern line skipped under the lenient parse policy."""

    pattern: str
    source: str
    line: int | None
    reason: str

    def message(self) -> str:
        """Return a one-line human readable description."""
        location = self.source if self.line is None else f"{self.source}:{self.line}"
        return f"Skipped ignore pattern {self.pattern!r} ({location}): {self.reason}."


@dataclass(slots=True, frozen=True)
class IgnoreSet:
    """Ordered rules where the last applicable rule decides."""

    rules: tuple[Rule, ...] = ()
    warnings: tuple[PatternWarning, ...] = ()

    def is_ignored(self, relative_path: str, is_directory: bool = False) -> bool:
        """Return True when the path sits in a pruned directory or its last rule ignores it."""
        parts = [part for part in relative_path.split("/") if part]
        for depth in range(1, len(parts)):
            if self.is_pruned("/".join(parts[:depth])):
                return True
        return self._decides_ignored("/".join(parts), is_directory)

    def is_pruned(self, directory: str) -> bool:
        """Return True when the walker must not descend into directory."""
        return self._decides_ignored(directory, True) and not self.could_reinclude_beneath(
            directory
        )

    def could_reinclude_beneath(self, directory: str) -> bool:
        """Return True when a later anchored negation reaches a path inside directory."""
        index = self._last_match(directory, True)
        start = 0 if index is None else index + 1
        return any(
            rule.negated and could_match_beneath(rule, directory) for rule in self.rules[start:]
        )

    def _decides_ignored(self, relative_path: str, is_directory: bool) -> bool:
        index = self._last_match(relative_path, is_directory)
        if index is None:
            return False
        return not self.rules[index].negated

    def _last_match(self, relative_path: str, is_directory: bool) -> int | None:
        for index in range(len(self.rules) - 1, -1, -1):
            if matches(self.rules[index], relative_path, is_directory):
                return index
        return None


def is_ignored(ignore_set: IgnoreSet, relative_path: str, is_directory: bool = False) -> bool:
    """Module-level form of IgnoreSet.is_ignored."""
    return ignore_set.is_ignored(relative_path, is_directory)


def build_ignore_set(
    file_lines: Sequence[str] = (),
    extra_rules: Iterable[str] = (),
    *,
    use_default_ignores: bool = True,
    strict_patterns: bool = False,
    file_path: str | None = None,
) -> IgnoreSet:
    """Compile defaults, ignore-file lines, then extra rules, preserving order."""
    rules: list[Rule] = []
    warnings: list[PatternWarning] = []

    def add(text: str, source: str, line: int | None) -> None:
        try:
            rule = compile_pattern(text, source=source, line=line)
        except PatternParseError as error:
            if strict_patterns:
                raise PatternParseError(
                    error.message,
                    pattern=error.pattern,
                    path=file_path if source == "file" else None,
                    line=line,
                ) from error
            warnings.append(
                PatternWarning(
                    pattern=error.pattern,
                    source=source,
                    line=line,
                    reason=error.message,
                )
            )
            return
        if rule is not None:
            rules.append(rule)

    if use_default_ignores:
        for text in DEFAULT_IGNORES:
            add(text, "default", None)
    for number, text in enumerate(file_lines, start=1):
        add(text, "file", number)
    for text in extra_rules:
        add(text, "extra", None)
    return IgnoreSet(rules=tuple(rules), warnings=tuple(warnings))


def read_ignore_file(root: Path, file_name: str = IGNORE_FILE_NAME) -> list[str]:
    """Read ignore-file lines; a missing file yields no lines."""
    path = root / file_name
    try:
        payload = path.read_bytes()
    except FileNotFoundError:
        return []
    except OSError as error:
        raise IgnoreFileReadError("Could not read ignore file", path=str(path)) from error
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as error:
        raise IgnoreFileReadError("Ignore file is not valid UTF-8", path=str(path)) from error
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def load_ignore_set(
    root: Path,
    extra_rules: Iterable[str] = (),
    *,
    file_name: str = IGNORE_FILE_NAME,
    use_default_ignores: bool = True,
    strict_patterns: bool = False,
) -> IgnoreSet:
    """Load the ignore set for a root directory."""
    lines = read_ignore_file(root, file_name)
    return build_ignore_set(
        lines,
        extra_rules,
        use_default_ignores=use_default_ignores,
        strict_patterns=strict_patterns,
        file_path=str(root / file_name),
    )
