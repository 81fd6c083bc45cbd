from __future__ import annotations

import hashlib
from pathlib import Path

from dirprint.server import create_server


def _site(root: Path) -> Path:
    site = root / "site"
    (site / "b").mkdir(parents=True)
    (site / "a.txt").write_text("hello", encoding="utf-8")
    (site / "b" / "c.txt").write_text("world", encoding="utf-8")
    (site / ".vercelignore").write_text("b/\n", encoding="utf-8")
    return site


def test_directory_tool_mirrors_data_source_shape(tmp_path: Path) -> None:
    _site(tmp_path)
    server = create_server(root=str(tmp_path))

    response = server.handle_payload(
        {"id": "req-dir", "method": "project.directory", "params": {"path": "site"}}
    )

    assert response["ok"] is True
    assert response["warnings"] == []
    assert response["result"] == {
        "id": "site",
        "path": "site",
        "files": {"a.txt": "5~aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"},
    }


def test_directory_tool_appends_request_patterns_last(tmp_path: Path) -> None:
    _site(tmp_path)
    server = create_server(root=str(tmp_path))

    response = server.handle_payload(
        {
            "id": "req-extra",
            "method": "project.directory",
            "params": {"path": "site", "extra_patterns": ["!b/c.txt", "[broken"]},
        }
    )

    assert response["result"]["files"] == {
        "a.txt": "5~aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d",
        "b/c.txt": f"5~{hashlib.sha1(b'world').hexdigest()}",
    }
    assert response["warnings"] == [
        "Skipped ignore pattern '[broken' (extra): Unterminated character class."
    ]


def test_data_dir_is_never_fingerprinted(tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<html>", encoding="utf-8")
    server = create_server(root=str(tmp_path))

    server.handle_payload({"id": "req-1", "method": "project.directory"})
    response = server.handle_payload({"id": "req-2", "method": "project.directory"})

    assert (tmp_path / ".dirprint" / "audit.jsonl").exists()
    assert list(response["result"]["files"]) == ["index.html"]


def test_diff_tool_reports_redeploy_need(tmp_path: Path) -> None:
    site = _site(tmp_path)
    server = create_server(root=str(tmp_path))
    first = server.handle_payload(
        {"id": "req-a", "method": "project.directory", "params": {"path": "site"}}
    )
    previous = first["result"]["files"]

    unchanged = server.handle_payload(
        {
            "id": "req-b",
            "method": "project.diff",
            "params": {"path": "site", "previous": previous},
        }
    )
    (site / "a.txt").write_text("hello!", encoding="utf-8")
    (site / "new.txt").write_text("n", encoding="utf-8")
    changed = server.handle_payload(
        {
            "id": "req-c",
            "method": "project.diff",
            "params": {"path": "site", "previous": previous},
        }
    )

    assert unchanged["result"]["redeploy_required"] is False
    assert unchanged["result"]["unchanged"] == ["a.txt"]
    assert changed["result"]["redeploy_required"] is True
    assert changed["result"]["changed"] == ["a.txt"]
    assert changed["result"]["added"] == ["new.txt"]
    assert changed["result"]["removed"] == []


def test_audit_log_tool_returns_recent_requests(tmp_path: Path) -> None:
    server = create_server(root=str(tmp_path))
    server.handle_payload({"id": "req-1", "method": "project.status"})
    server.handle_payload({"id": "req-2", "method": "project.status"})

    response = server.handle_payload(
        {"id": "req-3", "method": "project.audit_log", "params": {"limit": 1}}
    )

    assert [entry["request_id"] for entry in response["result"]["entries"]] == ["req-2"]
