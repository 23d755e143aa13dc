"""Byte-level file reads and writes that keep line endings and BOM intact.

Files are opened in binary mode so Python never translates newlines. Text is
handed to the rest of the engine ``\\n``-normalized, and the detected style is
restored on write.
"""
from __future__ import annotations

import os
from typing import Tuple, Union

import aiofiles

from ..logging import get_logger
from .exceptions import FileIOError
from .line_endings import apply_line_endings, detect_line_ending, get_platform_line_ending, normalize_line_endings
from .types import FileSnapshot

logger = get_logger(__name__)

UTF8_BOM: bytes = b"\xef\xbb\xbf"


def _decode_utf8_preserve_bom(data: bytes) -> Tuple[str, bytes]:
    """Decode UTF-8 while preserving a UTF-8 BOM if present."""

    if data.startswith(UTF8_BOM):
        return data[len(UTF8_BOM) :].decode("utf-8"), UTF8_BOM
    return data.decode("utf-8"), b""


async def read_text_file(path: Union[str, "os.PathLike[str]"]) -> FileSnapshot:
    """Read ``path`` into a ``FileSnapshot``.

    A missing file is not an error: it yields an empty snapshot with
    ``existed=False`` and the platform line ending.

    Raises:
        FileIOError: The file exists but cannot be read or is not UTF-8.
    """

    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except FileNotFoundError:
        return FileSnapshot(original_content="", original_line_ending=get_platform_line_ending(), existed=False)
    except OSError as e:
        raise FileIOError(f"Could not read file: {e.strerror or e}", path=os.fspath(path)) from e

    try:
        text, bom = _decode_utf8_preserve_bom(data)
    except UnicodeDecodeError as e:
        raise FileIOError(
            "File is not valid UTF-8 text",
            path=os.fspath(path),
            hint="Only UTF-8 text files can be edited",
        ) from e

    return FileSnapshot(
        original_content=normalize_line_endings(text),
        original_line_ending=detect_line_ending(text),
        existed=True,
        bom=bom,
    )


async def write_text_file(
    path: Union[str, "os.PathLike[str]"],
    text: str,
    line_ending: str,
    *,
    bom: bytes = b"",
) -> int:
    """Write ``text`` to ``path`` with ``line_ending`` and return the byte count.

    The file is truncated and rewritten in place, so links and permissions
    on the existing file are kept.
    """

    data = bom + apply_line_endings(text, line_ending).encode("utf-8")
    try:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
    except OSError as e:
        raise FileIOError(f"Could not write file: {e.strerror or e}", path=os.fspath(path)) from e

    logger.debug("Wrote file", path=os.fspath(path), bytes=len(data))
    return len(data)
