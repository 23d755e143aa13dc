"""Edit one file and report what changed.

``apply_file_edits`` is the single entry point callers use to change a file.
It resolves the path, reads the file, applies a full replacement or a list
of anchored edits, produces forward and reverse diffs, and writes the result
back with the file's own line-ending style.

The path is *not* checked against the sandbox here; gate it with
``validate_path`` first.
"""
from __future__ import annotations

import os
from typing import Any, Optional, Sequence, Union

from ..logging import get_logger
from .diff import build_diff_result, format_fenced_diff
from .edit_engine import build_modified_content
from .exceptions import EditNotFoundError, FileEditError
from .file_io import read_text_file, write_text_file
from .paths import resolve_path
from .types import EditOperation, EditRequest, FileEditResult

logger = get_logger(__name__)


def _error_result(error: FileEditError, path: str, *, file_exists: bool = False, dry_run: bool = False) -> FileEditResult:
    return FileEditResult(
        response=f"Error: {error.error}",
        file_exists=file_exists,
        path=path,
        dry_run=dry_run,
        error_kind=error.kind,
    )


def _format_response(
    path: str,
    modified: str,
    raw_diff: str,
    *,
    file_exists: bool,
    valid_edits: bool,
    dry_run: bool,
) -> str:
    if dry_run and (valid_edits or not file_exists):
        return f"Dry run: changes to {path} were not written\n{format_fenced_diff(raw_diff)}"
    if not file_exists:
        return f"Successfully created file {path} with content:\n{modified}"
    if valid_edits:
        return f"Successfully updated file {path} with diff:\n{format_fenced_diff(raw_diff)}"
    return f"No edits were made to file {path}"


async def apply_file_edits(
    base_dir: Union[str, "os.PathLike[str]"],
    path: Union[str, "os.PathLike[str]"],
    edits: Optional[Sequence[Union[EditOperation, dict[str, Any]]]] = None,
    content: Optional[str] = None,
    *,
    dry_run: bool = False,
) -> FileEditResult:
    """Apply ``content`` or ``edits`` to the file at ``path``.

    Args:
        base_dir: Directory that a relative ``path`` is resolved against.
        path: File to edit. It is created if it does not exist.
        edits: Anchored replacements applied in order. Either
            ``EditOperation`` objects or ``{"oldText", "newText"}`` dicts.
        content: Full replacement text. Mutually exclusive with ``edits``.
        dry_run: Compute the result and diffs without writing.

    Returns:
        A ``FileEditResult``. Failures are reported through ``error_kind``
        and ``response``; nothing is written when any edit fails.
    """
    absolute = resolve_path(base_dir, path)

    try:
        request = EditRequest.from_args(absolute, content=content, edits=edits)
    except FileEditError as e:
        return _error_result(e, absolute, dry_run=dry_run)

    try:
        snapshot = await read_text_file(absolute)
    except FileEditError as e:
        logger.warning("Could not read file for editing", path=absolute, error=e.error)
        return _error_result(e, absolute, file_exists=True, dry_run=dry_run)

    try:
        modified = build_modified_content(snapshot.original_content, edits=request.edits, content=request.content)
    except EditNotFoundError as e:
        logger.info(
            "Edit rejected, file left unchanged",
            path=absolute,
            edit_index=e.edit_index,
            edits=len(request.edits or ()),
        )
        return _error_result(e, absolute, file_exists=snapshot.existed, dry_run=dry_run)

    diffs = build_diff_result(
        snapshot.original_content,
        modified,
        absolute,
        original_line_ending=snapshot.original_line_ending,
        existed=snapshot.existed,
    )
    valid_edits = diffs.valid_edits

    should_write = valid_edits or not snapshot.existed
    if should_write and not dry_run:
        try:
            await write_text_file(absolute, modified, snapshot.original_line_ending, bom=snapshot.bom)
        except FileEditError as e:
            logger.error("Could not write edited file", path=absolute, error=e.error)
            return _error_result(e, absolute, file_exists=snapshot.existed)

    new_file_created = diffs.new_file_created and not dry_run
    logger.info(
        "File edit applied" if should_write and not dry_run else "File edit computed",
        path=absolute,
        file_exists=snapshot.existed,
        new_file_created=new_file_created,
        valid_edits=valid_edits,
        dry_run=dry_run,
    )

    return FileEditResult(
        response=_format_response(
            absolute,
            modified,
            diffs.raw_diff,
            file_exists=snapshot.existed,
            valid_edits=valid_edits,
            dry_run=dry_run,
        ),
        raw_diff=diffs.raw_diff,
        reverse_diff=diffs.reverse_diff,
        file_exists=snapshot.existed,
        new_file_created=new_file_created,
        valid_edits=valid_edits,
        path=absolute,
        dry_run=dry_run,
    )
