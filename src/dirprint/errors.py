"""Fatal error kinds raised while fingerprinting a directory tree."""

from __future__ import annotations


class FingerprintError(Exception):
    """Base class for failures that abort a fingerprint run."""

    code = "FINGERPRINT_ERROR"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message if path is None else f"{message}: {path}")
        self.message = message
        self.path = path

    def to_dict(self) -> dict[str, object]:
        """Return the error payload used in response envelopes."""
        return {"code": self.code, "message": self.message, "path": self.path}


class IgnoreFileReadError(FingerprintError):
    """Ignore file exists but could not be read or decoded."""

    code = "IGNORE_FILE_READ_ERROR"


class PatternParseError(FingerprintError):
    """Malformed ignore pattern under the strict pattern policy."""

    code = "PATTERN_PARSE_ERROR"

    def __init__(
        self,
        message: str,
        pattern: str,
        path: str | None = None,
        line: int | None = None,
    ) -> None:
        super().__init__(message, path)
        self.pattern = pattern
        self.line = line


class WalkError(FingerprintError):
    """Traversal could not continue at a path."""

    code = "WALK_ERROR"


class FileReadError(FingerprintError):
    """A file selected for inclusion could not be read or hashed."""

    code = "FILE_READ_ERROR"
