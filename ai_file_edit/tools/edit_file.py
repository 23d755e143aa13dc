"""ai_file_edit/tools/edit_file.py

### Tool contract (high level)

- Signature
  - ``async def edit_file(path: str, content: str | None = None,
    edits: list[dict] | None = None, dry_run: bool = False) -> str``

- Purpose
  - Create a file, rewrite it, or change parts of it by anchored
    replacements, and return a diff plus the reverse diff that undoes it.

- Matching semantics
  - Each ``oldText`` is first matched exactly (first occurrence).
  - Otherwise it is matched line by line ignoring leading/trailing
    whitespace, and the replacement is re-indented to the matched block.
  - Edits apply in order. If any edit fails nothing is written.

- Safety constraints
  - The path must resolve inside one of the allowed directories.
  - New files can only be created in existing directories.

- Output format
  - Returns a JSON string with ``status`` ``ok`` or ``error``.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ..core.exceptions import FileEditError
from ..core.file_edits import apply_file_edits
from ..core.paths import normalize_allowed_directories, validate_path
from ..core.types import EditRequest
from ..logging import get_logger, log_context
from .base import ConfigurableToolBase
from .responses import error_response_from, make_result_response

logger = get_logger(__name__)


class EditFileTool(ConfigurableToolBase):
    """Configurable edit_file tool bound to a set of allowed directories.

    The function returned by get_tool() is intended to be registered as an agent tool.

    Example:
        >>> tool = EditFileTool(base_dir="/workspace", allowed_directories=["/workspace"])
        >>> edit_file = tool.get_tool()
        >>> result = await edit_file("app.js", edits=[{"oldText": "add", "newText": "multiply"}])
    """

    TOOL_NAME = "edit_file"

    DOCSTRING_TEMPLATE = """Create a file or edit an existing one.

Provide either `content` to write the complete file, or `edits` to replace
parts of it. Each edit replaces the first occurrence of `oldText` with
`newText`. When `oldText` does not match exactly, it is matched line by line
ignoring leading and trailing whitespace, and `newText` is re-indented to fit.
Edits are applied in order; if one cannot be located no change is written.

Only files inside these directories can be edited: {allowed_directories}
Relative paths are resolved against: {base_dir}

Args:
    path: File to create or edit.
    content: Complete file content. Use for new files or full rewrites.
    edits: List of {{"oldText": ..., "newText": ...}} replacements.
    dry_run: If True, compute the diff without writing.

Returns:
    JSON with result:
    - Success: {{"status": "ok", "response": "...", "raw_diff": "...", "reverse_diff": "...", ...}}
    - Error:   {{"status": "error", "error_kind": "...", "error": "..."}}
"""

    INPUT_SCHEMA: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "path": {
                "type": "string",
                "description": "File to create or edit. Relative paths resolve against the base directory.",
            },
            "content": {
                "type": "string",
                "description": "Complete file content. Use for new files or full rewrites.",
            },
            "edits": {
                "type": "array",
                "description": "Replacements applied in order.",
                "items": {
                    "type": "object",
                    "properties": {
                        "oldText": {"type": "string", "description": "Text to find."},
                        "newText": {"type": "string", "description": "Text to replace it with."},
                    },
                    "required": ["oldText", "newText"],
                },
            },
            "dry_run": {
                "type": "boolean",
                "description": "If true, compute the diff without writing.",
                "default": False,
            },
        },
        "required": ["path"],
    }

    def __init__(
        self,
        base_dir: Union[str, Path],
        allowed_directories: Iterable[Union[str, "os.PathLike[str]"]],
        docstring_template: Optional[str] = None,
        schema_override: Optional[dict] = None,
    ):
        super().__init__(docstring_template=docstring_template, schema_override=schema_override)
        self.base_dir = Path(base_dir)
        self.allowed_directories = normalize_allowed_directories(allowed_directories)

    def _get_template_context(self) -> Dict[str, Any]:
        return {
            "allowed_directories": ", ".join(self.allowed_directories),
            "base_dir": str(self.base_dir),
        }

    def get_tool(self) -> Callable:
        instance = self

        async def edit_file(
            path: str,
            content: str | None = None,
            edits: list[dict] | None = None,
            dry_run: bool = False,
        ) -> str:
            """Placeholder docstring - replaced by template."""

            with log_context(tool="edit_file"):
                try:
                    EditRequest.from_args(path, content=content, edits=edits)
                    validated = await validate_path(instance.base_dir, path, instance.allowed_directories)
                except FileEditError as e:
                    logger.info("edit_file rejected", path=path, error_kind=e.kind.value)
                    return error_response_from(e)

                result = await apply_file_edits(
                    instance.base_dir,
                    validated,
                    edits=edits,
                    content=content,
                    dry_run=bool(dry_run),
                )
                return make_result_response(result)

        return self._apply_schema(edit_file)
