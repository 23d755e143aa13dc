"""
Sandboxed File Edit Library

Lets an automated caller change text files it only knows by approximate
anchors, keeps every change inside a set of allowed directories, and hands
back a unified diff plus a reverse diff that undoes it.

Main exports:
    - validate_path: Resolve a path and confirm it is inside the sandbox
    - apply_file_edits: Create, rewrite or patch a file and diff the result
    - apply_reverse_patch: Undo an edit with its reverse diff
    - SandboxConfig: Allowed directories plus a ready-made toolset
    - ToolRegistry: Register the tools and execute them by name

Example:
    >>> from ai_file_edit import SandboxConfig, ToolRegistry
    >>> config = SandboxConfig.from_directories("/workspace", ["/workspace"])
    >>> registry = ToolRegistry()
    >>> registry.register_tools(config.create_toolset())
    >>> result = await registry.execute("edit_file", {
    ...     "path": "app.js",
    ...     "edits": [{"oldText": "add(", "newText": "multiply("}],
    ... })
"""

__version__ = "0.1.0"

from .core import (
    AccessDeniedError,
    EditNotFoundError,
    EditOperation,
    EditRequest,
    ErrorKind,
    FileEditError,
    FileEditResult,
    InvalidPatchFormatError,
    ParentMissingError,
    PatchApplyError,
    ReversePatchResult,
    SandboxConfigError,
    apply_file_edits,
    apply_reverse_patch,
    create_reverse_unified_diff,
    create_unified_diff,
    validate_path,
)
from .logging import LogConfig, LogFormat, LogLevel, configure_logging, get_logger
from .tools import EditFileTool, RevertFileTool, SandboxConfig, ToolRegistry

__all__ = [
    "__version__",
    # Engine
    "validate_path",
    "apply_file_edits",
    "apply_reverse_patch",
    "create_unified_diff",
    "create_reverse_unified_diff",
    # Types
    "EditOperation",
    "EditRequest",
    "FileEditResult",
    "ReversePatchResult",
    # Errors
    "ErrorKind",
    "FileEditError",
    "AccessDeniedError",
    "ParentMissingError",
    "EditNotFoundError",
    "InvalidPatchFormatError",
    "PatchApplyError",
    "SandboxConfigError",
    # Tools
    "EditFileTool",
    "RevertFileTool",
    "SandboxConfig",
    "ToolRegistry",
    # Logging
    "LogConfig",
    "LogFormat",
    "LogLevel",
    "configure_logging",
    "get_logger",
]
