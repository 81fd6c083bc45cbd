"""Ignore pattern compilation and rule sets."""

from .patterns import Rule, compile_pattern, could_match_beneath, matches
from .rules import (
    DEFAULT_IGNORES,
    IGNORE_FILE_NAME,
    IgnoreSet,
    PatternWarning,
    build_ignore_set,
    is_ignored,
    load_ignore_set,
    read_ignore_file,
)

__all__ = [
    "DEFAULT_IGNORES",
    "IGNORE_FILE_NAME",
    "IgnoreSet",
    "PatternWarning",
    "Rule",
    "build_ignore_set",
    "compile_pattern",
    "could_match_beneath",
    "is_ignored",
    "load_ignore_set",
    "matches",
    "read_ignore_file",
]
