"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from dirprint.ignore import IGNORE_FILE_NAME
from dirprint.paths import relative_posix
from dirprint.scan import MAX_WORKERS_CAP, SnapshotOptions

CONFIG_FILE_NAME = "dirprint.toml"
DEFAULT_DATA_DIR_NAME = ".dirprint"


@dataclass(slots=True, frozen=True)
class IgnoreConfig:
    """Ignore rule sources and parse policy."""

    file_name: str
    extra_patterns: tuple[str, ...]
    use_default_ignores: bool
    strict_patterns: bool


@dataclass(slots=True, frozen=True)
class WalkConfig:
    """Traversal toggles."""

    follow_file_symlinks: bool


@dataclass(slots=True, frozen=True)
class FingerprintConfig:
    """Hashing concurrency settings."""

    max_workers: int


@dataclass(slots=True, frozen=True)
class DirprintConfig:
    """Fully merged configuration."""

    root: Path
    data_dir: Path
    ignore: IgnoreConfig
    walk: WalkConfig
    fingerprint: FingerprintConfig

    def snapshot_options(self, target_root: Path) -> SnapshotOptions:
        """Build snapshot options for a walk rooted at target_root."""
        excluded: tuple[str, ...] = ()
        data_dir_relative = relative_posix(target_root, self.data_dir)
        if data_dir_relative is not None:
            excluded = (data_dir_relative,)
        return SnapshotOptions(
            ignore_file_name=self.ignore.file_name,
            use_default_ignores=self.ignore.use_default_ignores,
            strict_patterns=self.ignore.strict_patterns,
            follow_file_symlinks=self.walk.follow_file_symlinks,
            max_workers=self.fingerprint.max_workers,
            excluded_paths=excluded,
        )

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for tool responses."""
        return {
            "root": str(self.root),
            "data_dir": str(self.data_dir),
            "ignore": {
                "file_name": self.ignore.file_name,
                "extra_pattern_count": len(self.ignore.extra_patterns),
                "use_default_ignores": self.ignore.use_default_ignores,
                "strict_patterns": self.ignore.strict_patterns,
            },
            "walk": {
                "follow_file_symlinks": self.walk.follow_file_symlinks,
            },
            "fingerprint": {
                "max_workers": self.fingerprint.max_workers,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    extra_patterns: tuple[str, ...] = ()
    use_default_ignores: bool | None = None
    strict_patterns: bool | None = None
    follow_file_symlinks: bool | None = None
    max_workers: int | None = None


def default_config(root: Path) -> DirprintConfig:
    """Build default config for a given root directory."""
    resolved_root = root.resolve()
    return DirprintConfig(
        root=resolved_root,
        data_dir=resolved_root / DEFAULT_DATA_DIR_NAME,
        ignore=IgnoreConfig(
            file_name=IGNORE_FILE_NAME,
            extra_patterns=(),
            use_default_ignores=True,
            strict_patterns=False,
        ),
        walk=WalkConfig(follow_file_symlinks=True),
        fingerprint=FingerprintConfig(max_workers=1),
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional dirprint.toml from the root directory."""
    config_path = root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_file_name(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    if "/" in value or "\\" in value:
        raise ValueError(f"Config field '{name}' must be a file name, not a path.")
    return value


def merge_config(
    base: DirprintConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> DirprintConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    ignore_payload = _get_table(file_payload, "ignore")
    walk_payload = _get_table(file_payload, "walk")
    fingerprint_payload = _get_table(file_payload, "fingerprint")

    extra_patterns = base.ignore.extra_patterns
    if "extra_patterns" in ignore_payload:
        extra_patterns = _tuple_of_strings(
            ignore_payload["extra_patterns"], "ignore", "extra_patterns"
        )

    merged = DirprintConfig(
        root=base.root,
        data_dir=base.data_dir,
        ignore=IgnoreConfig(
            file_name=_optional_file_name(
                ignore_payload.get("file_name"), "ignore.file_name", base.ignore.file_name
            ),
            extra_patterns=extra_patterns,
            use_default_ignores=_optional_bool(
                ignore_payload.get("use_default_ignores"),
                "ignore.use_default_ignores",
                base.ignore.use_default_ignores,
            ),
            strict_patterns=_optional_bool(
                ignore_payload.get("strict_patterns"),
                "ignore.strict_patterns",
                base.ignore.strict_patterns,
            ),
        ),
        walk=WalkConfig(
            follow_file_symlinks=_optional_bool(
                walk_payload.get("follow_file_symlinks"),
                "walk.follow_file_symlinks",
                base.walk.follow_file_symlinks,
            )
        ),
        fingerprint=FingerprintConfig(
            max_workers=_optional_positive_int_with_cap(
                fingerprint_payload.get("max_workers"),
                "fingerprint.max_workers",
                base.fingerprint.max_workers,
                MAX_WORKERS_CAP,
            )
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DirprintConfig, overrides: CliOverrides) -> DirprintConfig:
    """Apply startup overrides at highest precedence.

    Override patterns are appended after config-file patterns so they win ties.
    """
    ignore = IgnoreConfig(
        file_name=config.ignore.file_name,
        extra_patterns=config.ignore.extra_patterns + tuple(overrides.extra_patterns),
        use_default_ignores=(
            overrides.use_default_ignores
            if overrides.use_default_ignores is not None
            else config.ignore.use_default_ignores
        ),
        strict_patterns=(
            overrides.strict_patterns
            if overrides.strict_patterns is not None
            else config.ignore.strict_patterns
        ),
    )
    walk = WalkConfig(
        follow_file_symlinks=(
            overrides.follow_file_symlinks
            if overrides.follow_file_symlinks is not None
            else config.walk.follow_file_symlinks
        )
    )
    fingerprint = FingerprintConfig(
        max_workers=_optional_positive_int_with_cap(
            overrides.max_workers,
            "overrides.max_workers",
            config.fingerprint.max_workers,
            MAX_WORKERS_CAP,
        )
    )
    data_dir = overrides.data_dir or config.data_dir
    return DirprintConfig(
        root=config.root,
        data_dir=data_dir.resolve(),
        ignore=ignore,
        walk=walk,
        fingerprint=fingerprint,
    )


def load_effective_config(root: Path, overrides: CliOverrides | None = None) -> DirprintConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
