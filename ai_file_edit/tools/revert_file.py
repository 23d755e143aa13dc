"""revert_file tool: undo an edit with the reverse diff returned by edit_file."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ..core.exceptions import FileEditError
from ..core.paths import normalize_allowed_directories, validate_path
from ..core.reverse_patch import apply_reverse_patch
from ..logging import get_logger, log_context
from .base import ConfigurableToolBase
from .responses import error_response_from, make_result_response

logger = get_logger(__name__)


class RevertFileTool(ConfigurableToolBase):
    """Configurable revert_file tool bound to a set of allowed directories."""

    TOOL_NAME = "revert_file"

    DOCSTRING_TEMPLATE = """Revert a previous edit_file change.

Pass the `reverse_diff` returned by edit_file for the same file. The diff must
apply cleanly: if the file changed since, nothing is written and an error is
returned.

Only files inside these directories can be reverted: {allowed_directories}

Args:
    path: File to revert.
    patch: Unified diff to apply, normally a previous `reverse_diff`.

Returns:
    JSON with result:
    - Success: {{"status": "ok", "success": true, "path": "...", "hunks_applied": 1}}
    - Error:   {{"status": "error", "error_kind": "...", "error": "..."}}
"""

    INPUT_SCHEMA: Dict[str, Any] = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "description": "File to revert."},
            "patch": {
                "type": "string",
                "description": "Unified diff to apply, normally a previous reverse_diff.",
            },
        },
        "required": ["path", "patch"],
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
        return {"allowed_directories": ", ".join(self.allowed_directories)}

    def get_tool(self) -> Callable:
        instance = self

        async def revert_file(path: str, patch: str) -> str:
            """Placeholder docstring - replaced by template."""

            with log_context(tool="revert_file"):
                try:
                    validated = await validate_path(instance.base_dir, path, instance.allowed_directories)
                except FileEditError as e:
                    logger.info("revert_file rejected", path=path, error_kind=e.kind.value)
                    return error_response_from(e)

                result = await apply_reverse_patch(validated, patch)
                return make_result_response(result)

        return self._apply_schema(revert_file)
