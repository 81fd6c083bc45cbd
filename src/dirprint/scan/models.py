"""Typed models for directory snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class FileEntry:
    """A file selected by the walk, before hashing."""

    relative_path: str
    full_path: Path
    size: int


@dataclass(slots=True, frozen=True)
class DirectorySnapshot:
    """Fingerprints for every included file under one root."""

    id: str
    root: Path
    files: dict[str, str]
    warnings: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class SnapshotDelta:
    """Deterministic change classification between two snapshots."""

    added: tuple[str, ...]
    changed: tuple[str, ...]
    unchanged: tuple[str, ...]
    removed: tuple[str, ...]

    @property
    def redeploy_required(self) -> bool:
        return bool(self.added or self.changed or self.removed)
