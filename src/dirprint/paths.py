"""Root path resolution against an explicit base directory."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

from dirprint.errors import WalkError

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


def _normalize_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def resolve_root(base_dir: Path, candidate: str) -> Path:
    """Resolve a root path that may be relative to the caller's working directory."""
    normalized, is_absolute_style = _normalize_input(candidate.strip())
    if not normalized:
        raise WalkError("Root path is empty")
    if is_absolute_style:
        return Path(normalized).resolve(strict=False)
    return (base_dir.resolve() / Path(normalized)).resolve(strict=False)


def relative_posix(root: Path, path: Path) -> str | None:
    """Return path relative to root as a posix string, or None when outside root."""
    resolved_root = root.resolve()
    resolved = path.resolve(strict=False)
    if resolved == resolved_root or not resolved.is_relative_to(resolved_root):
        return None
    return resolved.relative_to(resolved_root).as_posix()
