"""Base interfaces and utilities for tool execution."""
from __future__ import annotations

import copy
import inspect
from typing import Any, Awaitable, Callable, Dict, Literal, Optional, Union

from ..logging import get_logger

logger = get_logger(__name__)


class ConfigurableToolBase:
    """Base class for tools whose description depends on configuration.

    Subclasses provide:
    - ``DOCSTRING_TEMPLATE``: the tool description, with ``{placeholder}``
      values filled from ``_get_template_context()``. Literal braces must be
      doubled.
    - ``TOOL_NAME`` and ``INPUT_SCHEMA``: the name and JSON schema of the
      tool's parameters.
    - ``get_tool()``: builds the tool function and returns
      ``self._apply_schema(func)``.

    Callers can replace the description with ``docstring_template`` or the
    whole schema with ``schema_override``.
    """

    DOCSTRING_TEMPLATE: str = ""
    TOOL_NAME: str = ""
    INPUT_SCHEMA: Dict[str, Any] = {"type": "object", "properties": {}, "required": []}

    def __init__(
        self,
        docstring_template: Optional[str] = None,
        schema_override: Optional[dict] = None,
    ):
        self.docstring_template = docstring_template
        self.schema_override = schema_override

    def _get_template_context(self) -> Dict[str, Any]:
        """Return values substituted into the docstring template."""
        return {}

    def _render_docstring(self) -> str:
        template = self.docstring_template or self.DOCSTRING_TEMPLATE
        return template.format(**self._get_template_context())

    @staticmethod
    def _description_from_docstring(docstring: str) -> str:
        """Use everything above the ``Args:`` section as the description."""
        head, _, _ = docstring.partition("\nArgs:")
        return head.strip()

    def _build_schema(self, func: Callable) -> dict:
        docstring = func.__doc__ or ""
        return {
            "name": self.TOOL_NAME or func.__name__,
            "description": self._description_from_docstring(docstring),
            "input_schema": copy.deepcopy(self.INPUT_SCHEMA),
        }

    def _apply_schema(self, func: Callable) -> Callable:
        """Attach the rendered docstring, ``__tool_schema__`` and ``__tool_instance__``."""
        func.__doc__ = self._render_docstring()
        if self.schema_override is not None:
            func.__tool_schema__ = copy.deepcopy(self.schema_override)
        else:
            func.__tool_schema__ = self._build_schema(func)
        func.__tool_instance__ = self
        return func

    def get_tool(self) -> Callable:
        raise NotImplementedError


class ToolRegistry:
    """Registry for managing tool functions and their schemas.

    This class provides a centralized way to register tools and their schemas,
    and execute them by name. Tools may be plain or async functions.
    """

    def __init__(self):
        """Initialize an empty tool registry."""
        self.tools: Dict[str, Callable] = {}
        self.schemas: list[dict] = []

    def register(self, name: str, func: Callable, schema: dict) -> None:
        """Register a tool with its function and schema.

        Args:
            name: Name of the tool
            func: The function to execute
            schema: Anthropic-compliant tool schema
        """
        if name in self.tools:
            self.schemas = [s for s in self.schemas if s.get("name") != name]
        self.tools[name] = func
        self.schemas.append(schema)

    def register_tools(self, tools: list[Callable]) -> None:
        """Register multiple tool functions at once.

        Each function must carry a ``__tool_schema__`` attribute, as the
        functions returned by ``ConfigurableToolBase.get_tool()`` do.

        Raises:
            ValueError: If a function is missing the __tool_schema__ attribute

        Example:
            >>> registry = ToolRegistry()
            >>> registry.register_tools(SandboxConfig.from_directories(".", ["."]).create_toolset())
        """
        for func in tools:
            if not hasattr(func, "__tool_schema__"):
                raise ValueError(
                    f"Function '{func.__name__}' is missing __tool_schema__ attribute. "
                    f"Build tools with a ConfigurableToolBase subclass."
                )

            schema = func.__tool_schema__
            self.register(schema["name"], func, schema)

    async def execute(self, tool_name: str, tool_input: Dict[str, Any]) -> str:
        """Execute a registered tool by name.

        Args:
            tool_name: Name of the tool to execute
            tool_input: Dictionary of input parameters

        Returns:
            String result from tool execution. Unknown tools and exceptions
            raised by the tool are reported as ``Error: ...`` strings.
        """
        if tool_name not in self.tools:
            return f"Error: Unknown tool '{tool_name}'"

        try:
            result: Union[str, Awaitable[str]] = self.tools[tool_name](**tool_input)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            logger.exception("Tool execution failed", tool=tool_name)
            return f"Error executing {tool_name}: {str(e)}"

    def get_schemas(self, schema_type: Literal["anthropic", "openai"] = "anthropic") -> list[dict]:
        """Get registered tool schemas in the requested format.

        Args:
            schema_type: Output format.
                - ``anthropic`` returns the raw Anthropic schema dictionaries (default)
                - ``openai`` converts each schema into OpenAI's function-call payload

        Returns:
            List of schema dictionaries matching the requested format.
        """
        if schema_type == "anthropic":
            return self.schemas.copy()

        if schema_type == "openai":
            openai_payload = []
            for schema in self.schemas:
                openai_payload.append({
                    "type": "function",
                    "function": {
                        "name": schema["name"],
                        "description": schema["description"],
                        "parameters": schema["input_schema"],
                    },
                })
            return openai_payload

        raise ValueError(f"Unsupported schema_type '{schema_type}'. Expected 'anthropic' or 'openai'.")
