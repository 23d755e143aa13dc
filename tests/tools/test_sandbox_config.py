import dataclasses
import os
from pathlib import Path

import pytest

from ai_file_edit.core.exceptions import SandboxConfigError
from ai_file_edit.tools.sandbox_config import ENV_ALLOWED_DIRECTORIES, ENV_BASE_DIR, SandboxConfig


@pytest.fixture()
def clean_env(monkeypatch):
    monkeypatch.delenv(ENV_ALLOWED_DIRECTORIES, raising=False)
    monkeypatch.delenv(ENV_BASE_DIR, raising=False)
    return monkeypatch


class TestFromDirectories:
    def test_normalizes_directories(self, tmp_path: Path) -> None:
        (tmp_path / "a").mkdir()
        config = SandboxConfig.from_directories(tmp_path, [tmp_path / "a" / ".." / "a"])

        assert config.allowed_directories == (str(tmp_path / "a"),)
        assert config.base_dir == tmp_path

    def test_relative_base_dir_is_made_absolute(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = SandboxConfig.from_directories(".", [tmp_path])
        assert config.base_dir == Path(os.path.abspath("."))

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(SandboxConfigError, match="does not exist"):
            SandboxConfig.from_directories(tmp_path, [tmp_path / "missing"])

    def test_file_is_not_a_directory(self, tmp_path: Path) -> None:
        (tmp_path / "file.txt").write_text("x", encoding="utf-8")
        with pytest.raises(SandboxConfigError, match="not a directory"):
            SandboxConfig.from_directories(tmp_path, [tmp_path / "file.txt"])

    def test_missing_directory_allowed_without_check(self, tmp_path: Path) -> None:
        config = SandboxConfig.from_directories(tmp_path, [tmp_path / "later"], require_existing=False)
        assert config.allowed_directories == (str(tmp_path / "later"),)

    def test_empty_directory_list(self, tmp_path: Path) -> None:
        with pytest.raises(SandboxConfigError):
            SandboxConfig.from_directories(tmp_path, [])

    def test_config_error_is_a_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            SandboxConfig(base_dir=tmp_path, allowed_directories=())

    def test_string_base_dir_becomes_path(self, tmp_path: Path) -> None:
        config = SandboxConfig(base_dir=str(tmp_path), allowed_directories=(str(tmp_path),))
        assert isinstance(config.base_dir, Path)

    def test_is_frozen(self, tmp_path: Path) -> None:
        config = SandboxConfig.from_directories(tmp_path, [tmp_path])
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.allowed_directories = ("/",)


class TestFromEnv:
    def test_reads_directories(self, tmp_path: Path, clean_env) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        first.mkdir()
        second.mkdir()
        clean_env.setenv(ENV_ALLOWED_DIRECTORIES, os.pathsep.join([str(first), str(second)]))

        config = SandboxConfig.from_env(dotenv_path=tmp_path / "absent.env")

        assert config.allowed_directories == (str(first), str(second))
        assert config.base_dir == first

    def test_base_dir_override(self, tmp_path: Path, clean_env) -> None:
        clean_env.setenv(ENV_ALLOWED_DIRECTORIES, str(tmp_path))
        clean_env.setenv(ENV_BASE_DIR, str(tmp_path / "sub"))

        config = SandboxConfig.from_env(dotenv_path=tmp_path / "absent.env")
        assert config.base_dir == tmp_path / "sub"

    def test_unset(self, tmp_path: Path, clean_env) -> None:
        with pytest.raises(SandboxConfigError, match=ENV_ALLOWED_DIRECTORIES):
            SandboxConfig.from_env(dotenv_path=tmp_path / "absent.env")

    def test_loads_dotenv_file(self, tmp_path: Path, clean_env) -> None:
        workspace = tmp_path / "workspace"
        workspace.mkdir()
        env_file = tmp_path / ".env"
        env_file.write_text(f"{ENV_ALLOWED_DIRECTORIES}={workspace}\n", encoding="utf-8")

        # Registered so monkeypatch restores the variable load_dotenv sets.
        clean_env.setenv(ENV_ALLOWED_DIRECTORIES, "")
        clean_env.delenv(ENV_ALLOWED_DIRECTORIES)

        config = SandboxConfig.from_env(dotenv_path=env_file)
        assert config.allowed_directories == (str(workspace),)


class TestCreateToolset:
    def test_tool_names(self, tmp_path: Path) -> None:
        tools = SandboxConfig.from_directories(tmp_path, [tmp_path]).create_toolset()
        assert [t.__tool_schema__["name"] for t in tools] == ["edit_file", "revert_file"]

    def test_constraints_in_description(self, tmp_path: Path) -> None:
        tools = SandboxConfig.from_directories(tmp_path, [tmp_path]).create_toolset()

        for tool in tools:
            description = tool.__tool_schema__["description"]
            assert "\n\nConstraints:\n" in description
            assert f"- allowed_directories: {tmp_path}" in description
            assert f"- base_dir: {tmp_path}" in description

    def test_tools_share_config(self, tmp_path: Path) -> None:
        config = SandboxConfig.from_directories(tmp_path, [tmp_path])
        for tool in config.create_toolset():
            instance = tool.__tool_instance__
            assert instance.base_dir == config.base_dir
            assert tuple(instance.allowed_directories) == config.allowed_directories
