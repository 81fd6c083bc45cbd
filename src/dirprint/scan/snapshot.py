"""Top-level fingerprint operations over a directory tree."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from dirprint.ignore import IGNORE_FILE_NAME, load_ignore_set
from dirprint.scan.fingerprint import fingerprint_entries
from dirprint.scan.models import DirectorySnapshot, SnapshotDelta
from dirprint.scan.walker import check_root, discover_entries


@dataclass(slots=True, frozen=True)
class SnapshotOptions:
    """Per-invocation settings for one snapshot."""

    ignore_file_name: str = IGNORE_FILE_NAME
    use_default_ignores: bool = True
    strict_patterns: bool = False
    follow_file_symlinks: bool = True
    max_workers: int = 1
    excluded_paths: tuple[str, ...] = ()


def snapshot_directory(
    root: str | os.PathLike[str],
    extra_rules: Iterable[str] = (),
    *,
    options: SnapshotOptions | None = None,
) -> DirectorySnapshot:
    """Walk root and fingerprint every included file.

    The ignore set is rebuilt from disk on every call. Any error aborts the whole
    snapshot; a partial mapping is never returned.
    """
    settings = options or SnapshotOptions()
    resolved = Path(root).resolve()
    check_root(resolved)
    ignore_set = load_ignore_set(
        resolved,
        extra_rules,
        file_name=settings.ignore_file_name,
        use_default_ignores=settings.use_default_ignores,
        strict_patterns=settings.strict_patterns,
    )
    # The root ignore file is a control file and never part of the result.
    excluded_paths = {settings.ignore_file_name, *settings.excluded_paths}
    entries = discover_entries(
        resolved,
        ignore_set,
        follow_file_symlinks=settings.follow_file_symlinks,
        excluded_paths=excluded_paths,
    )
    files = fingerprint_entries(entries, max_workers=settings.max_workers)
    return DirectorySnapshot(
        id=os.fspath(root),
        root=resolved,
        files=files,
        warnings=tuple(warning.message() for warning in ignore_set.warnings),
    )


def compute_fingerprints(
    root: str | os.PathLike[str],
    extra_rules: Iterable[str] = (),
    *,
    options: SnapshotOptions | None = None,
) -> dict[str, str]:
    """Return the mapping of relative path to fingerprint for root."""
    return snapshot_directory(root, extra_rules, options=options).files


def diff_snapshots(previous: Mapping[str, str], current: Mapping[str, str]) -> SnapshotDelta:
    """Compute deterministic added/changed/unchanged/removed sets."""
    previous_paths = set(previous.keys())
    current_paths = set(current.keys())

    changed: list[str] = []
    unchanged: list[str] = []
    for path in sorted(previous_paths & current_paths):
        if previous[path] == current[path]:
            unchanged.append(path)
            continue
        changed.append(path)

    return SnapshotDelta(
        added=tuple(sorted(current_paths - previous_paths)),
        changed=tuple(changed),
        unchanged=tuple(unchanged),
        removed=tuple(sorted(previous_paths - current_paths)),
    )
