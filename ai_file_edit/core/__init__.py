"""Sandboxed patch engine: path validation, edits, diffs and reverse patches."""

from .diff import (
    DiffLine,
    FilePatch,
    Hunk,
    apply_patch,
    build_diff_result,
    create_reverse_unified_diff,
    create_unified_diff,
    format_fenced_diff,
    format_patch,
    parse_patch,
    reverse_patch,
)
from .edit_engine import apply_edits, build_modified_content
from .exceptions import (
    AccessDeniedError,
    EditNotFoundError,
    ErrorKind,
    FileEditError,
    FileIOError,
    InvalidEditRequestError,
    InvalidPatchFormatError,
    ParentMissingError,
    PatchApplyError,
    SandboxConfigError,
)
from .file_edits import apply_file_edits
from .line_endings import (
    apply_line_endings,
    detect_line_ending,
    get_platform_line_ending,
    normalize_line_endings,
)
from .paths import expand_home, normalize_path, resolve_path, validate_path
from .reverse_patch import apply_reverse_patch
from .types import (
    AllowedDirectorySet,
    DiffResult,
    EditOperation,
    EditRequest,
    FileEditResult,
    FileSnapshot,
    ReversePatchResult,
)

__all__ = [
    # Entry points
    "validate_path",
    "apply_file_edits",
    "apply_reverse_patch",
    # Paths
    "expand_home",
    "normalize_path",
    "resolve_path",
    # Edits
    "apply_edits",
    "build_modified_content",
    # Diffs
    "DiffLine",
    "FilePatch",
    "Hunk",
    "apply_patch",
    "build_diff_result",
    "create_unified_diff",
    "create_reverse_unified_diff",
    "format_fenced_diff",
    "format_patch",
    "parse_patch",
    "reverse_patch",
    # Line endings
    "apply_line_endings",
    "detect_line_ending",
    "get_platform_line_ending",
    "normalize_line_endings",
    # Types
    "AllowedDirectorySet",
    "DiffResult",
    "EditOperation",
    "EditRequest",
    "FileEditResult",
    "FileSnapshot",
    "ReversePatchResult",
    # Errors
    "ErrorKind",
    "FileEditError",
    "AccessDeniedError",
    "ParentMissingError",
    "EditNotFoundError",
    "InvalidPatchFormatError",
    "PatchApplyError",
    "FileIOError",
    "InvalidEditRequestError",
    "SandboxConfigError",
]
