from __future__ import annotations

from pathlib import Path

import pytest

from dirprint.errors import WalkError
from dirprint.paths import relative_posix, resolve_root


def test_relative_root_resolves_against_base_dir(tmp_path: Path) -> None:
    (tmp_path / "site").mkdir()
    assert resolve_root(tmp_path, "site") == (tmp_path / "site").resolve()
    assert resolve_root(tmp_path, "./site/../site") == (tmp_path / "site").resolve()
    assert resolve_root(tmp_path, "site\\nested") == (tmp_path / "site" / "nested").resolve()


def test_absolute_root_ignores_base_dir(tmp_path: Path) -> None:
    other = tmp_path / "other"
    assert resolve_root(Path("/unrelated"), str(other)) == other.resolve()


def test_empty_root_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(WalkError, match="Root path is empty"):
        resolve_root(tmp_path, "   ")


def test_relative_posix_only_inside_root(tmp_path: Path) -> None:
    assert relative_posix(tmp_path, tmp_path / "a" / "b") == "a/b"
    assert relative_posix(tmp_path, tmp_path) is None
    assert relative_posix(tmp_path / "a", tmp_path / "b") is None
