"""Tests for the edit_file and revert_file tools.

Tests cover:
- JSON results for successful and rejected calls
- Sandbox enforcement before any file access
- Docstring templates and schema overrides
- Reverting an edit with the returned reverse diff
"""
import asyncio
import json
from pathlib import Path

import pytest

from ai_file_edit.tools.edit_file import EditFileTool
from ai_file_edit.tools.revert_file import RevertFileTool


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def edit_file(workspace: Path):
    return EditFileTool(base_dir=workspace, allowed_directories=[workspace]).get_tool()


@pytest.fixture
def revert_file(workspace: Path):
    return RevertFileTool(base_dir=workspace, allowed_directories=[workspace]).get_tool()


def call(tool, **kwargs) -> dict:
    return json.loads(asyncio.run(tool(**kwargs)))


class TestEditFileTool:
    def test_creates_file(self, workspace: Path, edit_file) -> None:
        data = call(edit_file, path="hello.txt", content="hi\n")

        assert data["status"] == "ok"
        assert data["new_file_created"] is True
        assert data["path"] == str(workspace / "hello.txt")
        assert (workspace / "hello.txt").read_text(encoding="utf-8") == "hi\n"

    def test_edits_file(self, workspace: Path, edit_file) -> None:
        (workspace / "app.js").write_bytes(b"const x = add(1, 2);\n")
        data = call(edit_file, path="app.js", edits=[{"oldText": "add", "newText": "multiply"}])

        assert data["status"] == "ok"
        assert data["valid_edits"] is True
        assert "+const x = multiply(1, 2);\n" in data["raw_diff"]

    def test_traversal_is_denied(self, tmp_path: Path, edit_file) -> None:
        data = call(edit_file, path="../../etc/passwd", content="x")

        assert data["status"] == "error"
        assert data["error_kind"] == "access_denied"
        assert "Access denied" in data["error"]

    def test_sibling_directory_is_denied(self, tmp_path: Path, edit_file) -> None:
        data = call(edit_file, path=str(tmp_path / "outside.txt"), content="x")

        assert data["error_kind"] == "access_denied"
        assert not (tmp_path / "outside.txt").exists()

    def test_content_and_edits_together(self, workspace: Path, edit_file) -> None:
        data = call(edit_file, path="a.txt", content="x", edits=[{"oldText": "", "newText": "y"}])

        assert data["error_kind"] == "invalid_request"
        assert not (workspace / "a.txt").exists()

    def test_missing_parent(self, workspace: Path, edit_file) -> None:
        data = call(edit_file, path="no/such/dir/a.txt", content="x")

        assert data["error_kind"] == "parent_missing"
        assert "hint" in data

    def test_missing_anchor(self, workspace: Path, edit_file) -> None:
        (workspace / "a.txt").write_bytes(b"abc\n")
        data = call(edit_file, path="a.txt", edits=[{"oldText": "zzz", "newText": "y"}])

        assert data["status"] == "error"
        assert data["error_kind"] == "edit_not_found"
        assert (workspace / "a.txt").read_bytes() == b"abc\n"

    def test_dry_run(self, workspace: Path, edit_file) -> None:
        data = call(edit_file, path="a.txt", content="x", dry_run=True)

        assert data["dry_run"] is True
        assert data["response"].startswith("Dry run:")
        assert not (workspace / "a.txt").exists()


class TestRevertFileTool:
    def test_reverts_edit(self, workspace: Path, edit_file, revert_file) -> None:
        target = workspace / "app.js"
        target.write_bytes(b"function add(a, b) { return a + b; }\n")

        edited = call(edit_file, path="app.js", edits=[{"oldText": "add", "newText": "multiply"}])
        reverted = call(revert_file, path="app.js", patch=edited["reverse_diff"])

        assert reverted["status"] == "ok"
        assert reverted["hunks_applied"] == 1
        assert target.read_bytes() == b"function add(a, b) { return a + b; }\n"

    def test_invalid_patch(self, workspace: Path, revert_file) -> None:
        (workspace / "a.txt").write_bytes(b"a\n")
        data = call(revert_file, path="a.txt", patch="not a diff")

        assert data["error_kind"] == "invalid_patch_format"
        assert data["error"] == "Invalid reverse diff format"

    def test_outside_sandbox(self, tmp_path: Path, revert_file) -> None:
        data = call(revert_file, path=str(tmp_path), patch="")
        assert data["error_kind"] == "access_denied"


class TestToolConfiguration:
    def test_schema(self, edit_file) -> None:
        schema = edit_file.__tool_schema__

        assert schema["name"] == "edit_file"
        assert schema["input_schema"]["required"] == ["path"]
        assert "Args:" not in schema["description"]

    def test_docstring_mentions_sandbox(self, workspace: Path, edit_file) -> None:
        assert str(workspace) in edit_file.__doc__
        assert '{"oldText": ..., "newText": ...}' in edit_file.__doc__

    def test_custom_docstring_template(self, workspace: Path) -> None:
        tool = EditFileTool(
            base_dir=workspace,
            allowed_directories=[workspace],
            docstring_template="Edit files under {allowed_directories}.",
        ).get_tool()

        assert tool.__doc__ == f"Edit files under {workspace}."
        assert tool.__tool_schema__["description"] == f"Edit files under {workspace}."

    def test_schema_override(self, workspace: Path) -> None:
        override = {
            "name": "write_file",
            "description": "Write a file.",
            "input_schema": {"type": "object", "properties": {"path": {"type": "string"}}, "required": ["path"]},
        }
        tool = RevertFileTool(base_dir=workspace, allowed_directories=[workspace], schema_override=override).get_tool()
        assert tool.__tool_schema__ == override

    def test_tool_instance(self, workspace: Path) -> None:
        tool = EditFileTool(base_dir=workspace, allowed_directories=[workspace])
        fn = tool.get_tool()

        assert fn.__tool_instance__ is tool
        assert tuple(fn.__tool_instance__.allowed_directories) == (str(workspace),)
