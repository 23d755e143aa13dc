"""Undo a previous edit by applying its reverse diff."""
from __future__ import annotations

import os
from typing import Union

from ..logging import get_logger
from .diff import apply_patch, parse_patch
from .exceptions import ErrorKind, FileEditError
from .file_io import read_text_file, write_text_file
from .types import ReversePatchResult

logger = get_logger(__name__)


async def apply_reverse_patch(
    file_path: Union[str, "os.PathLike[str]"],
    patch_text: str,
) -> ReversePatchResult:
    """Apply ``patch_text`` to the file at ``file_path``.

    Only the first file section of the patch is used. The file keeps its
    BOM and its line-ending style, or the style named by the patch's
    ``Line-Ending:`` line when present. Failures are reported on the
    result, never raised, and leave the file untouched.
    """
    path = os.fspath(file_path)

    try:
        patches = parse_patch(patch_text)
        if not patches or not patches[0].hunks:
            return ReversePatchResult(
                success=False,
                error="Invalid reverse diff format",
                error_kind=ErrorKind.INVALID_PATCH_FORMAT,
                path=path,
            )
        if len(patches) > 1:
            logger.warning("Ignoring extra file sections in reverse diff", path=path, sections=len(patches))

        snapshot = await read_text_file(path)
        if not snapshot.existed:
            return ReversePatchResult(
                success=False,
                error=f"File not found: {path}",
                error_kind=ErrorKind.IO_ERROR,
                path=path,
            )

        patch = patches[0]
        reverted = apply_patch(snapshot.original_content, patch)
        line_ending = patch.line_ending or snapshot.original_line_ending
        await write_text_file(path, reverted, line_ending, bom=snapshot.bom)
    except FileEditError as e:
        logger.info("Reverse patch failed", path=path, error_kind=e.kind.value, error=e.error)
        error = e.error
        if e.kind is ErrorKind.PATCH_APPLY_FAILED:
            error = f"Failed to apply reverse patch: {e.error}"
        return ReversePatchResult(success=False, error=error, error_kind=e.kind, path=path)

    logger.info("Reverse patch applied", path=path, hunks=len(patch.hunks))
    return ReversePatchResult(success=True, path=path, hunks_applied=len(patch.hunks))
