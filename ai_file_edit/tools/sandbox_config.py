"""Sandbox configuration for the file tools.

This module provides SandboxConfig, a frozen dataclass that carries the
allowed directories and creates a configured toolset whose schemas include
the sandbox constraints.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from dotenv import load_dotenv

from ..core.exceptions import SandboxConfigError
from ..core.paths import expand_home, normalize_allowed_directories

ENV_ALLOWED_DIRECTORIES = "AI_FILE_EDIT_ALLOWED_DIRS"
ENV_BASE_DIR = "AI_FILE_EDIT_BASE_DIR"


@dataclass(frozen=True)
class SandboxConfig:
    """Configuration for the file tool sandbox.

    The allowed directories are the only source of authority for file
    access. The value is immutable and is handed to every tool it creates.

    Example:
        >>> config = SandboxConfig.from_directories("/workspace", ["/workspace", "~/notes"])
        >>> tools = config.create_toolset()
        >>> registry = ToolRegistry()
        >>> registry.register_tools(tools)
    """

    base_dir: Path
    allowed_directories: tuple[str, ...]

    def __post_init__(self) -> None:
        if isinstance(self.base_dir, str):
            object.__setattr__(self, "base_dir", Path(self.base_dir))
        if not self.allowed_directories:
            raise SandboxConfigError("At least one allowed directory is required")

    @classmethod
    def from_directories(
        cls,
        base_dir: Union[str, "os.PathLike[str]"],
        directories: Iterable[Union[str, "os.PathLike[str]"]],
        *,
        require_existing: bool = True,
    ) -> "SandboxConfig":
        """Build a config from raw directory arguments.

        Every directory is home-expanded, made absolute and normalized.

        Raises:
            SandboxConfigError: No directories were given, or (with
                ``require_existing``) one is missing or not a directory.
        """
        allowed = normalize_allowed_directories(directories)
        if not allowed:
            raise SandboxConfigError("At least one allowed directory is required")

        if require_existing:
            for directory in allowed:
                if not os.path.exists(directory):
                    raise SandboxConfigError(f"Allowed directory does not exist: {directory}")
                if not os.path.isdir(directory):
                    raise SandboxConfigError(f"Allowed path is not a directory: {directory}")

        base = Path(os.path.abspath(expand_home(base_dir)))
        return cls(base_dir=base, allowed_directories=tuple(allowed))

    @classmethod
    def from_env(
        cls,
        *,
        dotenv_path: Optional[Union[str, "os.PathLike[str]"]] = None,
        require_existing: bool = True,
    ) -> "SandboxConfig":
        """Build a config from environment variables, loading ``.env`` first.

        ``AI_FILE_EDIT_ALLOWED_DIRS`` lists the allowed directories separated
        by ``os.pathsep``. ``AI_FILE_EDIT_BASE_DIR`` sets the base directory
        and defaults to the first allowed directory. Variables already set in
        the environment win over the ``.env`` file.
        """
        load_dotenv(dotenv_path)
        raw = os.environ.get(ENV_ALLOWED_DIRECTORIES, "")
        directories = [d.strip() for d in raw.split(os.pathsep) if d.strip()]
        if not directories:
            raise SandboxConfigError(f"{ENV_ALLOWED_DIRECTORIES} is not set")

        base_dir = os.environ.get(ENV_BASE_DIR) or directories[0]
        return cls.from_directories(base_dir, directories, require_existing=require_existing)

    def _augment_schema(self, tool_func: Callable, constraints: Dict[str, Any]) -> Callable:
        """Append a "Constraints" section to the tool's schema description."""
        if not hasattr(tool_func, "__tool_schema__"):
            return tool_func

        schema = tool_func.__tool_schema__
        original_desc = schema.get("description", "")

        constraint_lines: List[str] = []
        for key, value in constraints.items():
            constraint_lines.append(f"- {key}: {value}")

        schema["description"] = original_desc + "\n\nConstraints:\n" + "\n".join(constraint_lines)
        return tool_func

    def create_toolset(self) -> List[Callable]:
        """Create the edit_file and revert_file tools for this sandbox.

        Returns:
            Tool functions ready for ``ToolRegistry.register_tools``.
        """
        from .edit_file import EditFileTool
        from .revert_file import RevertFileTool

        constraints = {
            "allowed_directories": ", ".join(self.allowed_directories),
            "base_dir": str(self.base_dir),
        }

        tools: List[Callable] = []
        for tool_cls in (EditFileTool, RevertFileTool):
            tool_func = tool_cls(
                base_dir=self.base_dir,
                allowed_directories=self.allowed_directories,
            ).get_tool()
            tools.append(self._augment_schema(tool_func, constraints))
        return tools
