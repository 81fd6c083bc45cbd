"""Structured JSONL audit log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

_VERBATIM_ARGUMENTS = frozenset({"path", "since"})
_COUNTED_ARGUMENTS = {"extra_patterns": "extra_pattern_count", "previous": "previous_file_count"}


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized record of one fingerprint request."""

    timestamp: str
    request_id: str
    tool: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Reduce request arguments to loggable shape; pattern text is never recorded."""
    sanitized: dict[str, object] = {}
    for key, value in sorted(arguments.items()):
        if key in _COUNTED_ARGUMENTS and isinstance(value, (list, dict)):
            sanitized[_COUNTED_ARGUMENTS[key]] = len(value)
        elif isinstance(value, str):
            if key in _VERBATIM_ARGUMENTS:
                sanitized[key] = value
            else:
                sanitized[f"{key}_present"] = True
                sanitized[f"{key}_length"] = len(value)
        elif isinstance(value, int) or value is None:
            sanitized[key] = value
        else:
            sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Append-only JSONL audit logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Append one event as a single JSON line, creating the directory on first use."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Return the newest events, at most limit, stamped at or after since."""
        if limit < 1 or not self._path.exists():
            return []
        with self._path.open("r", encoding="utf-8") as handle:
            records = [
                record
                for record in map(_parse_line, handle)
                if record is not None and _stamped_since(record, since)
            ]
        return records[-limit:]


def _parse_line(line: str) -> dict[str, object] | None:
    stripped = line.strip()
    if not stripped:
        return None
    try:
        record = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    return record if isinstance(record, dict) else None


def _stamped_since(record: dict[str, object], since: str | None) -> bool:
    if since is None:
        return True
    timestamp = record.get("timestamp")
    return isinstance(timestamp, str) and timestamp >= since
