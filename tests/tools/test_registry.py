import asyncio
import json
from pathlib import Path

import pytest

from ai_file_edit.tools.base import ConfigurableToolBase, ToolRegistry
from ai_file_edit.tools.sandbox_config import SandboxConfig


class EchoTool(ConfigurableToolBase):
    TOOL_NAME = "echo"
    DOCSTRING_TEMPLATE = """Echo text back with a {prefix} prefix.

Args:
    text: Text to echo.
"""
    INPUT_SCHEMA = {
        "type": "object",
        "properties": {"text": {"type": "string"}},
        "required": ["text"],
    }

    def __init__(self, prefix: str = ">", **kwargs):
        super().__init__(**kwargs)
        self.prefix = prefix

    def _get_template_context(self):
        return {"prefix": self.prefix}

    def get_tool(self):
        instance = self

        def echo(text: str) -> str:
            """Placeholder docstring - replaced by template."""
            if text == "boom":
                raise RuntimeError("exploded")
            return f"{instance.prefix}{text}"

        return self._apply_schema(echo)


@pytest.fixture()
def toolset(tmp_path: Path):
    return SandboxConfig.from_directories(tmp_path, [tmp_path]).create_toolset()


@pytest.fixture()
def registry(toolset):
    reg = ToolRegistry()
    reg.register_tools(toolset)
    reg.register_tools([EchoTool().get_tool()])
    return reg


def test_register_tools_populates_registry(registry) -> None:
    assert set(registry.tools) == {"edit_file", "revert_file", "echo"}
    assert len(registry.schemas) == 3


def test_register_tools_requires_schema() -> None:
    registry = ToolRegistry()

    def undecorated(a: int) -> int:
        return a

    with pytest.raises(ValueError):
        registry.register_tools([undecorated])


def test_reregistering_replaces_schema(registry) -> None:
    registry.register_tools([EchoTool(prefix="#").get_tool()])
    names = [schema["name"] for schema in registry.schemas]
    assert names.count("echo") == 1


def test_execute_sync_tool(registry) -> None:
    assert asyncio.run(registry.execute("echo", {"text": "hi"})) == ">hi"


def test_execute_async_tool(registry, tmp_path: Path) -> None:
    result = asyncio.run(registry.execute("edit_file", {"path": "a.txt", "content": "x"}))
    assert json.loads(result)["status"] == "ok"
    assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "x"


def test_execute_unknown_tool_returns_error(registry) -> None:
    result = asyncio.run(registry.execute("unknown", {}))
    assert result == "Error: Unknown tool 'unknown'"


def test_execute_exception_returns_error(registry) -> None:
    result = asyncio.run(registry.execute("echo", {"text": "boom"}))
    assert result == "Error executing echo: exploded"


def test_execute_bad_arguments_returns_error(registry) -> None:
    result = asyncio.run(registry.execute("echo", {"nope": 1}))
    assert result.startswith("Error executing echo:")


def test_get_schemas_anthropic(registry) -> None:
    schemas = registry.get_schemas()
    echo = next(s for s in schemas if s["name"] == "echo")
    assert echo["description"] == "Echo text back with a > prefix."
    assert echo["input_schema"]["required"] == ["text"]


def test_get_schemas_openai(registry) -> None:
    payload = registry.get_schemas("openai")
    assert all(item["type"] == "function" for item in payload)
    edit = next(item for item in payload if item["function"]["name"] == "edit_file")
    assert edit["function"]["parameters"]["required"] == ["path"]


def test_get_schemas_rejects_unknown_format(registry) -> None:
    with pytest.raises(ValueError):
        registry.get_schemas("gemini")


class TestConfigurableToolBase:
    def test_docstring_rendered(self) -> None:
        fn = EchoTool(prefix="$").get_tool()
        assert fn.__doc__.startswith("Echo text back with a $ prefix.")

    def test_custom_docstring_template(self) -> None:
        fn = EchoTool(docstring_template="Repeat the text.\n\nArgs:\n    text: Text.\n").get_tool()
        assert fn.__tool_schema__["description"] == "Repeat the text."

    def test_schema_override(self) -> None:
        override = {
            "name": "custom_echo",
            "description": "Custom",
            "input_schema": {"type": "object", "properties": {}, "required": []},
        }
        fn = EchoTool(schema_override=override).get_tool()
        assert fn.__tool_schema__ == override
        assert fn.__tool_schema__ is not override

    def test_tool_instance_attached(self) -> None:
        tool = EchoTool()
        fn = tool.get_tool()
        assert fn.__tool_instance__ is tool

    def test_input_schema_is_copied(self) -> None:
        fn = EchoTool().get_tool()
        fn.__tool_schema__["input_schema"]["required"].append("extra")
        assert EchoTool.INPUT_SCHEMA["required"] == ["text"]

    def test_base_get_tool_not_implemented(self) -> None:
        with pytest.raises(NotImplementedError):
            ConfigurableToolBase().get_tool()
