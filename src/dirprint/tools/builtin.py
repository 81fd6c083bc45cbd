"""Built-in snapshot tools."""

from __future__ import annotations

from collections.abc import Callable

from dirprint.config import DirprintConfig
from dirprint.scan import DirectorySnapshot, diff_snapshots
from dirprint.tools.registry import ToolDispatchError, ToolHandler, ToolRegistry

MAX_AUDIT_ENTRIES = 200

SnapshotFn = Callable[[str, tuple[str, ...]], DirectorySnapshot]

DIRECTORY_DESCRIPTION = (
    "Recursively reads files under a directory and returns a map of relative path to "
    "'{size}~{sha1}' fingerprints, honoring the ignore file and extra_patterns."
)
DIFF_DESCRIPTION = (
    "Snapshots a directory and compares it with a previous files map to decide whether "
    "a redeploy is needed."
)


def register_builtin_tools(
    registry: ToolRegistry,
    config: DirprintConfig,
    snapshot: SnapshotFn,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> None:
    """Register the project.* tool set."""
    registry.register("project.directory", _directory_handler(snapshot), DIRECTORY_DESCRIPTION)
    registry.register("project.diff", _diff_handler(snapshot), DIFF_DESCRIPTION)
    registry.register(
        "project.status",
        _status_handler(registry, config),
        "Returns the effective configuration and registered tools.",
    )
    registry.register(
        "project.audit_log",
        _audit_log_handler(read_audit_entries),
        "Returns recent audit events, oldest first.",
    )


def _directory_handler(snapshot: SnapshotFn) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        path = _path_argument(arguments, "project.directory")
        extra_patterns = _patterns_argument(arguments, "project.directory")
        result = snapshot(path, extra_patterns)
        return {
            "id": result.id,
            "path": path,
            "files": dict(sorted(result.files.items())),
            "__warnings__": list(result.warnings),
        }

    return handler


def _diff_handler(snapshot: SnapshotFn) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        path = _path_argument(arguments, "project.diff")
        extra_patterns = _patterns_argument(arguments, "project.diff")
        previous_value = arguments.get("previous", {})
        if not isinstance(previous_value, dict) or not all(
            isinstance(key, str) and isinstance(value, str)
            for key, value in previous_value.items()
        ):
            raise ToolDispatchError(
                code="INVALID_PARAMS",
                message="project.diff previous must be an object of string fingerprints.",
            )
        result = snapshot(path, extra_patterns)
        delta = diff_snapshots(previous_value, result.files)
        return {
            "id": result.id,
            "added": list(delta.added),
            "changed": list(delta.changed),
            "unchanged": list(delta.unchanged),
            "removed": list(delta.removed),
            "redeploy_required": delta.redeploy_required,
            "__warnings__": list(result.warnings),
        }

    return handler


def _status_handler(registry: ToolRegistry, config: DirprintConfig) -> ToolHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return {
            "effective_config": config.to_public_dict(),
            "tools": registry.describe(),
        }

    return handler


def _audit_log_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> ToolHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since_value = arguments.get("since")
        limit_value = arguments.get("limit", 50)

        since: str | None = since_value if isinstance(since_value, str) else None
        limit = limit_value if isinstance(limit_value, int) else 50
        limit = max(1, min(limit, MAX_AUDIT_ENTRIES))
        return {"entries": read_audit_entries(since, limit)}

    return handler


def _path_argument(arguments: dict[str, object], tool: str) -> str:
    value = arguments.get("path", ".")
    if not isinstance(value, str) or not value.strip():
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{tool} path must be a non-empty string.",
        )
    return value


def _patterns_argument(arguments: dict[str, object], tool: str) -> tuple[str, ...]:
    value = arguments.get("extra_patterns", [])
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ToolDispatchError(
            code="INVALID_PARAMS",
            message=f"{tool} extra_patterns must be a list of strings.",
        )
    return tuple(value)
