"""Directory walking and content fingerprinting."""

from .fingerprint import (
    MAX_WORKERS_CAP,
    fingerprint,
    fingerprint_bytes,
    fingerprint_entries,
    format_fingerprint,
)
from .models import DirectorySnapshot, FileEntry, SnapshotDelta
from .snapshot import SnapshotOptions, compute_fingerprints, diff_snapshots, snapshot_directory
from .walker import check_root, discover_entries, walk

__all__ = [
    "DirectorySnapshot",
    "FileEntry",
    "MAX_WORKERS_CAP",
    "SnapshotDelta",
    "SnapshotOptions",
    "check_root",
    "compute_fingerprints",
    "diff_snapshots",
    "discover_entries",
    "fingerprint",
    "fingerprint_bytes",
    "fingerprint_entries",
    "format_fingerprint",
    "snapshot_directory",
    "walk",
]
