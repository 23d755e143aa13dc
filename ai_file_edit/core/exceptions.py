"""Error taxonomy for the patch engine.

Every failure the engine can report maps to one ``ErrorKind``. The
exceptions carry that kind so callers branch on ``exc.kind`` rather than on
exception classes or message text; the public edit and revert operations
convert them into result objects instead of letting them escape.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of failure reported by the engine."""

    ACCESS_DENIED = "access_denied"
    PARENT_MISSING = "parent_missing"
    EDIT_NOT_FOUND = "edit_not_found"
    INVALID_PATCH_FORMAT = "invalid_patch_format"
    PATCH_APPLY_FAILED = "patch_apply_failed"
    IO_ERROR = "io_error"
    INVALID_REQUEST = "invalid_request"


class FileEditError(Exception):
    """Base exception for all engine errors."""

    kind: ErrorKind = ErrorKind.IO_ERROR

    def __init__(self, error: str, path: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.path = path
        self.hint = hint


class AccessDeniedError(FileEditError):
    """The requested path resolves outside every allowed directory."""

    kind = ErrorKind.ACCESS_DENIED


class ParentMissingError(FileEditError):
    """A new file was requested in a directory that does not exist."""

    kind = ErrorKind.PARENT_MISSING


class EditNotFoundError(FileEditError):
    """An edit anchor matched neither exactly nor line-by-line.

    Attributes:
        old_text: The anchor that could not be located.
        edit_index: Position of the failing edit in the request.
        partial_content: Working content after the edits that did apply.
    """

    kind = ErrorKind.EDIT_NOT_FOUND

    def __init__(self, old_text: str, edit_index: int, partial_content: str):
        super().__init__(f"Could not find exact match for edit:\n{old_text}")
        self.old_text = old_text
        self.edit_index = edit_index
        self.partial_content = partial_content


class InvalidPatchFormatError(FileEditError):
    """Patch text could not be parsed into at least one hunk."""

    kind = ErrorKind.INVALID_PATCH_FORMAT


class PatchApplyError(FileEditError):
    """A parsed patch does not apply to the current content."""

    kind = ErrorKind.PATCH_APPLY_FAILED


class FileIOError(FileEditError):
    """Reading or writing the target file failed."""

    kind = ErrorKind.IO_ERROR


class InvalidEditRequestError(FileEditError):
    """An edit request is malformed (e.g. both content and edits given)."""

    kind = ErrorKind.INVALID_REQUEST


class SandboxConfigError(ValueError):
    """Raised when a sandbox configuration is unusable."""
