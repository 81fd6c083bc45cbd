"""Content fingerprints in the form ``{byte_length}~{sha1_hex}``."""

from __future__ import annotations

import hashlib
import os
import stat
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from dirprint.errors import FileReadError
from dirprint.scan.models import FileEntry

FINGERPRINT_SEPARATOR = "~"
CHUNK_BYTES = 1024 * 128
MAX_WORKERS_CAP = 32


def format_fingerprint(byte_length: int, hex_digest: str) -> str:
    """Join a byte length and lowercase hex digest."""
    return f"{byte_length}{FINGERPRINT_SEPARATOR}{hex_digest.lower()}"


def fingerprint_bytes(content: bytes) -> str:
    """Fingerprint an in-memory payload."""
    digest = hashlib.sha1(content, usedforsecurity=False)
    return format_fingerprint(len(content), digest.hexdigest())


def fingerprint(path: Path) -> str:
    """Stream a regular file through SHA-1 and return its fingerprint."""
    digest = hashlib.sha1(usedforsecurity=False)
    total = 0
    try:
        with Path(path).open("rb") as handle:
            if not stat.S_ISREG(os.fstat(handle.fileno()).st_mode):
                raise FileReadError("Not a regular file", path=str(path))
            for chunk in iter(lambda: handle.read(CHUNK_BYTES), b""):
                total += len(chunk)
                digest.update(chunk)
    except OSError as error:
        raise FileReadError("Could not read file", path=str(path)) from error
    return format_fingerprint(total, digest.hexdigest())


def fingerprint_entries(entries: Sequence[FileEntry], max_workers: int = 1) -> dict[str, str]:
    """Fingerprint entries, optionally across a bounded thread pool.

    The first failure in path order is raised; no partial mapping is returned.
    """
    if max_workers <= 1 or len(entries) <= 1:
        return {entry.relative_path: fingerprint(entry.full_path) for entry in entries}

    workers = min(max_workers, MAX_WORKERS_CAP, len(entries))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dirprint-hash") as executor:
        pending: list[tuple[str, Future[str]]] = [
            (entry.relative_path, executor.submit(fingerprint, entry.full_path))
            for entry in entries
        ]
        results: dict[str, str] = {}
        try:
            for relative_path, future in pending:
                results[relative_path] = future.result()
        except FileReadError:
            for _, future in pending:
                future.cancel()
            raise
    return results
