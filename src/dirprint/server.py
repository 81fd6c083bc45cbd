"""Command line and JSON-lines entrypoint."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from dirprint.config import CliOverrides, DirprintConfig, load_effective_config
from dirprint.errors import FingerprintError
from dirprint.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from dirprint.paths import resolve_root
from dirprint.scan import DirectorySnapshot, snapshot_directory
from dirprint.tools.builtin import register_builtin_tools
from dirprint.tools.registry import ToolDispatchError, ToolRegistry


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming request."""

    request_id: str
    method: str
    params: dict[str, object]


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one-shot snapshots and server mode."""
    parser = argparse.ArgumentParser(
        prog="dirprint",
        description="Fingerprint the files of a directory for deployment change detection.",
    )
    parser.add_argument("--root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Extra ignore pattern applied after the ignore file; repeatable.",
    )
    parser.add_argument("--max-workers", type=int, required=False, default=None)
    parser.add_argument("--no-default-ignores", action="store_true")
    parser.add_argument("--strict-patterns", action="store_true")
    parser.add_argument("--no-follow-file-symlinks", action="store_true")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Answer JSON-line requests on stdin instead of printing one snapshot.",
    )
    return parser


class StdioServer:
    """JSON-lines request router over the snapshot tools."""

    def __init__(self, config: DirprintConfig, *, record_audit: bool = True) -> None:
        self._config = config
        self._record_audit = record_audit
        self._audit_logger = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        self._registry = ToolRegistry()
        register_builtin_tools(
            self._registry,
            config=config,
            snapshot=self.snapshot,
            read_audit_entries=self._audit_logger.read,
        )
        self._fallback_request_counter = 0

    @property
    def config(self) -> DirprintConfig:
        return self._config

    def snapshot(self, path: str, extra_patterns: tuple[str, ...] = ()) -> DirectorySnapshot:
        """Snapshot a directory relative to the configured root."""
        target = resolve_root(self._config.root, path)
        snapshot = snapshot_directory(
            target,
            self._config.ignore.extra_patterns + extra_patterns,
            options=self._config.snapshot_options(target),
        )
        return DirectorySnapshot(
            id=path,
            root=snapshot.root,
            files=snapshot.files,
            warnings=snapshot.warnings,
        )

    def serve(self, in_stream: TextIO, out_stream: TextIO) -> None:
        """Process JSON-line requests and write JSON-line responses."""
        for raw_line in in_stream:
            line = raw_line.strip()
            if not line:
                continue
            response = self.handle_json_line(line)
            out_stream.write(f"{json.dumps(response, sort_keys=True)}\n")
            out_stream.flush()

    def handle_json_line(self, raw_line: str) -> dict[str, object]:
        """Handle a single JSON-line request."""
        try:
            payload = json.loads(raw_line)
        except json.JSONDecodeError:
            request_id = self.next_request_id()
            response = self.error_response(
                request_id=request_id,
                code="INVALID_JSON",
                message="Request must be valid JSON.",
            )
            self.log_request(
                request_id=request_id,
                tool_name="invalid_json",
                arguments={"raw_line_length": len(raw_line)},
                response=response,
            )
            return response
        return self.handle_payload(payload)

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate and dispatch a parsed payload."""
        parsed = self.parse_request(payload)
        if isinstance(parsed, dict):
            request_id_value = parsed.get("request_id")
            request_id = (
                request_id_value if isinstance(request_id_value, str) else self.next_request_id()
            )
            self.log_request(
                request_id=request_id,
                tool_name="invalid_request",
                arguments={},
                response=parsed,
            )
            return parsed

        request = parsed
        if request.method == "tools/list":
            return self.success_response(request.request_id, {"tools": self._registry.describe()})

        tool_name = request.method
        arguments = request.params
        if request.method == "tools/call":
            tool_name_value = request.params.get("name")
            arguments_value = request.params.get("arguments", {})
            if not isinstance(tool_name_value, str) or not tool_name_value:
                return self.error_response(
                    request_id=request.request_id,
                    code="INVALID_PARAMS",
                    message="tools/call params.name must be a non-empty string.",
                )
            if not isinstance(arguments_value, dict):
                return self.error_response(
                    request_id=request.request_id,
                    code="INVALID_PARAMS",
                    message="tools/call params.arguments must be an object.",
                )
            tool_name = tool_name_value
            arguments = arguments_value

        try:
            result = self._registry.dispatch(name=tool_name, arguments=arguments)
        except FingerprintError as error:
            response = self.error_response(
                request_id=request.request_id,
                code=error.code,
                message=error.message,
                path=error.path,
            )
        except ToolDispatchError as error:
            response = self.error_response(
                request_id=request.request_id,
                code=error.code,
                message=error.message,
            )
        else:
            warnings = _extract_result_warnings(result)
            response = self.success_response(request.request_id, result, warnings)
        self.log_request(
            request_id=request.request_id,
            tool_name=tool_name,
            arguments=arguments,
            response=response,
        )
        return response

    def parse_request(self, payload: object) -> Request | dict[str, object]:
        """Validate request payload and return normalized Request."""
        if not isinstance(payload, dict):
            return self.error_response(
                request_id=self.next_request_id(),
                code="INVALID_REQUEST",
                message="Request must be an object.",
            )

        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        params = payload.get("params", {})

        if not isinstance(method, str) or not method:
            return self.error_response(
                request_id=request_id,
                code="INVALID_REQUEST",
                message="Request method must be a non-empty string.",
            )
        if not isinstance(params, dict):
            return self.error_response(
                request_id=request_id,
                code="INVALID_PARAMS",
                message="Request params must be an object.",
            )
        return Request(request_id=request_id, method=method, params=params)

    def extract_request_id(self, request_id: object) -> str:
        """Extract request ID from payload or synthesize a fallback."""
        if isinstance(request_id, str) and request_id:
            return request_id
        if isinstance(request_id, int):
            return str(request_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        """Generate sequential fallback request IDs for invalid/missing IDs."""
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    @staticmethod
    def success_response(
        request_id: str,
        result: dict[str, object],
        warnings: list[str] | None = None,
    ) -> dict[str, object]:
        """Build success envelope."""
        return {
            "request_id": request_id,
            "ok": True,
            "result": result,
            "warnings": warnings or [],
        }

    @staticmethod
    def error_response(
        request_id: str,
        code: str,
        message: str,
        path: str | None = None,
    ) -> dict[str, object]:
        """Build error envelope; no partial result is ever attached."""
        return {
            "request_id": request_id,
            "ok": False,
            "result": {},
            "warnings": [],
            "error": {"code": code, "message": message, "path": path},
        }

    def log_request(
        self,
        request_id: str,
        tool_name: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Log one sanitized request event."""
        if not self._record_audit:
            return
        error_payload = response.get("error")
        error_code: str | None = None
        if isinstance(error_payload, dict):
            code_value = error_payload.get("code")
            if isinstance(code_value, str):
                error_code = code_value
        metadata = sanitize_arguments(arguments)
        result = response.get("result")
        if isinstance(result, dict) and isinstance(result.get("files"), dict):
            metadata["file_count"] = len(result["files"])
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=request_id,
            tool=tool_name,
            ok=bool(response.get("ok", False)),
            error_code=error_code,
            metadata=metadata,
        )
        self._audit_logger.append(event)


def create_server(
    root: str,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
    record_audit: bool = True,
) -> StdioServer:
    """Create a configured server instance."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = CliOverrides(
            data_dir=Path(data_dir).resolve(),
            extra_patterns=overrides.extra_patterns,
            use_default_ignores=overrides.use_default_ignores,
            strict_patterns=overrides.strict_patterns,
            follow_file_symlinks=overrides.follow_file_symlinks,
            max_workers=overrides.max_workers,
        )
    config = load_effective_config(root=Path(root).resolve(), overrides=overrides)
    return StdioServer(config=config, record_audit=record_audit)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the dirprint command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        extra_patterns=tuple(args.exclude),
        use_default_ignores=False if args.no_default_ignores else None,
        strict_patterns=True if args.strict_patterns else None,
        follow_file_symlinks=False if args.no_follow_file_symlinks else None,
        max_workers=args.max_workers,
    )
    try:
        # One-shot runs leave the fingerprinted tree untouched; only --serve keeps an audit log.
        server = create_server(root=args.root, cli_overrides=overrides, record_audit=args.serve)
    except ValueError as error:
        parser.error(str(error))
    if args.serve:
        server.serve(in_stream=sys.stdin, out_stream=sys.stdout)
        return 0
    response = server.handle_payload({"id": "cli", "method": "project.directory", "params": {}})
    sys.stdout.write(f"{json.dumps(response, indent=2, sort_keys=True)}\n")
    return 0 if response["ok"] else 1


def _extract_result_warnings(result: dict[str, object]) -> list[str]:
    raw = result.pop("__warnings__", None)
    if not isinstance(raw, list):
        return []
    return [item for item in raw if isinstance(item, str)]


if __name__ == "__main__":
    raise SystemExit(main())
