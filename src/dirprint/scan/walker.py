"""Deterministic directory traversal filtered by an ignore set."""

from __future__ import annotations

import os
import stat
from collections.abc import Collection
from pathlib import Path

from dirprint.errors import WalkError
from dirprint.ignore import IgnoreSet
from dirprint.scan.models import FileEntry


def walk(
    root: Path,
    ignore_set: IgnoreSet,
    *,
    follow_file_symlinks: bool = True,
    excluded_paths: Collection[str] = (),
) -> list[str]:
    """Return included file paths relative to root, slash-separated and sorted."""
    entries = discover_entries(
        root,
        ignore_set,
        follow_file_symlinks=follow_file_symlinks,
        excluded_paths=excluded_paths,
    )
    return [entry.relative_path for entry in entries]


def check_root(root: Path) -> os.stat_result:
    """Stat the walk root, raising WalkError unless it is an accessible directory."""
    try:
        root_stat = root.stat()
    except OSError as error:
        raise WalkError("Root directory is not accessible", path=str(root)) from error
    if not stat.S_ISDIR(root_stat.st_mode):
        raise WalkError("Root path is not a directory", path=str(root))
    return root_stat


def discover_entries(
    root: Path,
    ignore_set: IgnoreSet,
    *,
    follow_file_symlinks: bool = True,
    excluded_paths: Collection[str] = (),
) -> list[FileEntry]:
    """Walk the tree depth-first, pruning ignored directories.

    Symlinked directories are never descended. The first unreadable directory or
    broken symlink aborts the walk with WalkError.
    """
    root_stat = check_root(root)
    excluded = set(excluded_paths)
    visited: set[tuple[int, int]] = {(root_stat.st_dev, root_stat.st_ino)}
    entries: list[FileEntry] = []
    stack: list[tuple[Path, str]] = [(root, "")]
    while stack:
        current, prefix = stack.pop()
        try:
            with os.scandir(current) as iterator:
                ordered_entries = sorted(iterator, key=lambda item: item.name)
        except OSError as error:
            raise WalkError("Could not list directory", path=str(current)) from error
        for entry in reversed(ordered_entries):
            relative = f"{prefix}{entry.name}"
            if relative in excluded:
                continue
            full_path = Path(entry.path)
            try:
                is_symlink = entry.is_symlink()
                is_dir = not is_symlink and entry.is_dir(follow_symlinks=False)
                is_file = not is_symlink and entry.is_file(follow_symlinks=False)
            except OSError as error:
                raise WalkError("Could not inspect entry", path=str(full_path)) from error

            if is_dir:
                # Ignored directories are entered only to reach an anchored re-inclusion.
                if ignore_set.is_pruned(relative):
                    continue
                key = _directory_key(full_path)
                if key in visited:
                    raise WalkError("Directory cycle detected", path=str(full_path))
                visited.add(key)
                stack.append((full_path, f"{relative}/"))
                continue

            if is_symlink:
                if not follow_file_symlinks or ignore_set.is_ignored(relative, False):
                    continue
                target = _symlink_target(full_path)
                if stat.S_ISREG(target.st_mode):
                    entries.append(
                        FileEntry(
                            relative_path=relative,
                            full_path=full_path,
                            size=target.st_size,
                        )
                    )
                continue

            if not is_file or ignore_set.is_ignored(relative, False):
                continue
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as error:
                raise WalkError("Could not stat file", path=str(full_path)) from error
            entries.append(FileEntry(relative_path=relative, full_path=full_path, size=size))

    entries.sort(key=lambda item: item.relative_path)
    return entries


def _directory_key(path: Path) -> tuple[int, int]:
    try:
        info = path.lstat()
    except OSError as error:
        raise WalkError("Could not stat directory", path=str(path)) from error
    return info.st_dev, info.st_ino


def _symlink_target(path: Path) -> os.stat_result:
    try:
        return path.stat()
    except FileNotFoundError as error:
        raise WalkError("Broken symbolic link", path=str(path)) from error
    except OSError as error:
        raise WalkError("Could not resolve symbolic link", path=str(path)) from error
