"""Path resolution and sandbox validation.

``validate_path`` is the only gate between a caller-supplied path and the
filesystem. Containment is decided lexically first, so ``..`` segments and
prefix look-alikes (``/allowed-2`` vs ``/allowed``) are rejected before any
probing happens. Then the two filesystem branches apply:

- an existing path (symlink or not) resolves to its real target, and that
  target is trusted without a second containment check;
- a path that does not exist yet is accepted only if the real path of its
  parent directory is inside the sandbox.

The asymmetry is intentional: existing links inside the sandbox were put
there by someone with access to it, while new files must not be created
through a parent that escapes it.
"""
from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterable, Union

import aiofiles.os

from ..logging import get_logger
from .exceptions import AccessDeniedError, ParentMissingError
from .types import AllowedDirectorySet

logger = get_logger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def expand_home(filepath: PathLike) -> str:
    """Expand a leading ``~`` or ``~/`` to the caller's home directory.

    ``~user`` forms are left alone.
    """
    text = os.fspath(filepath)
    if text == "~":
        return os.path.expanduser("~")
    if text.startswith("~/") or text.startswith("~" + os.sep):
        return os.path.join(os.path.expanduser("~"), text[2:])
    return text


def normalize_path(filepath: PathLike) -> str:
    """Collapse redundant separators and ``.``/``..`` segments lexically."""
    return os.path.normpath(os.fspath(filepath))


def resolve_path(base_dir: PathLike, requested_path: PathLike) -> str:
    """Make ``requested_path`` absolute, relative to ``base_dir``.

    Home shorthand is expanded in both arguments. Symlinks are not followed.
    """
    expanded = expand_home(requested_path)
    if os.path.isabs(expanded):
        return normalize_path(expanded)
    base = os.path.abspath(expand_home(base_dir))
    return normalize_path(os.path.join(base, expanded))


def normalize_allowed_directories(directories: Iterable[PathLike]) -> AllowedDirectorySet:
    """Normalize allowed directories the same way requested paths are."""
    return AllowedDirectorySet(
        tuple(normalize_path(os.path.abspath(expand_home(d))) for d in directories)
    )


def is_within_directory(path: str, directory: str) -> bool:
    """Return True if ``path`` is ``directory`` or lies below it.

    Prefix matching respects separator boundaries.
    """
    path_key = os.path.normcase(path)
    dir_key = os.path.normcase(directory)
    if path_key == dir_key:
        return True
    prefix = dir_key if dir_key.endswith(os.sep) else dir_key + os.sep
    return path_key.startswith(prefix)


def _is_allowed(path: str, allowed: Iterable[str]) -> bool:
    return any(is_within_directory(path, directory) for directory in allowed)


async def validate_path(
    base_dir: PathLike,
    requested_path: PathLike,
    allowed_directories: Iterable[PathLike],
) -> Path:
    """Resolve ``requested_path`` and confirm it lies inside the sandbox.

    Args:
        base_dir: Directory that relative paths are resolved against.
        requested_path: Absolute, relative or ``~``-prefixed path.
        allowed_directories: Directories that bound all access.

    Returns:
        The absolute path to operate on. For existing paths this is the
        real path with symlinks resolved.

    Raises:
        AccessDeniedError: The path (or a new file's parent) is outside
            every allowed directory.
        ParentMissingError: The path does not exist and neither does its
            parent directory.
    """
    allowed = normalize_allowed_directories(allowed_directories)
    absolute = resolve_path(base_dir, requested_path)

    if not _is_allowed(absolute, allowed):
        logger.warning("Path outside allowed directories", path=absolute)
        raise AccessDeniedError(
            f"Access denied - path outside allowed directories: {absolute} "
            f"not in {', '.join(allowed)}",
            path=absolute,
        )

    is_link = await asyncio.to_thread(os.path.islink, absolute)
    if is_link or await aiofiles.os.path.exists(absolute):
        real_path = await asyncio.to_thread(os.path.realpath, absolute)
        if is_link:
            logger.debug("Following symlink", path=absolute, target=real_path)
        return Path(real_path)

    parent_dir = os.path.dirname(absolute)
    if not await aiofiles.os.path.isdir(parent_dir):
        raise ParentMissingError(
            f"Parent directory does not exist: {parent_dir}",
            path=absolute,
            hint="Create the directory first or choose an existing one",
        )

    real_parent = await asyncio.to_thread(os.path.realpath, parent_dir)
    real_allowed = [await asyncio.to_thread(os.path.realpath, d) for d in allowed]
    if not (_is_allowed(real_parent, allowed) or _is_allowed(real_parent, real_allowed)):
        logger.warning("Parent directory outside allowed directories", path=absolute, parent=real_parent)
        raise AccessDeniedError(
            "Access denied - parent directory outside allowed directories",
            path=absolute,
        )

    return Path(absolute)
