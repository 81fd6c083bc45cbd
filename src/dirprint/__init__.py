"""Content fingerprints of directory trees for deployment change detection."""

from .errors import (
    FileReadError,
    FingerprintError,
    IgnoreFileReadError,
    PatternParseError,
    WalkError,
)
from .scan import (
    DirectorySnapshot,
    SnapshotDelta,
    SnapshotOptions,
    compute_fingerprints,
    diff_snapshots,
    snapshot_directory,
)

__version__ = "0.1.0"

__all__ = [
    "DirectorySnapshot",
    "FileReadError",
    "FingerprintError",
    "IgnoreFileReadError",
    "PatternParseError",
    "SnapshotDelta",
    "SnapshotOptions",
    "WalkError",
    "compute_fingerprints",
    "diff_snapshots",
    "snapshot_directory",
]
