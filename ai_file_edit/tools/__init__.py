"""Tool surface for the patch engine.

This module provides:
- ToolRegistry: Central registry for tool functions and schemas
- ConfigurableToolBase: Base class for tools with templated descriptions
- EditFileTool / RevertFileTool: The edit and undo tools
- SandboxConfig: Allowed directories plus a ready-made toolset
"""

from .base import ConfigurableToolBase, ToolRegistry
from .edit_file import EditFileTool
from .revert_file import RevertFileTool
from .sandbox_config import SandboxConfig

__all__ = [
    'ConfigurableToolBase',
    'ToolRegistry',
    'EditFileTool',
    'RevertFileTool',
    'SandboxConfig',
]
