"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest

from wfedit.config import (
    ConfigLoader,
    EnvOverrides,
    GlobalConfig,
    WfEditConfig,
    WorkflowSettings,
    get_default_config,
)
from wfedit.core.exceptions import ConfigError
from wfedit.core.logging import LogLevel
from wfedit.core.output import OutputFormat


@pytest.fixture
def project_dir(tmp_path, monkeypatch) -> Path:
    """Run from an empty project directory."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


class TestConfigModels:
    """Tests for configuration models."""

    def test_defaults(self):
        config = get_default_config()
        assert config.global_settings.output_format == OutputFormat.TABLE
        assert config.global_settings.verbosity == LogLevel.WARNING
        assert config.workflows.entry_tool == "execute_sequence"
        assert config.workflows.file_patterns == ["*.yml", "*.yaml"]
        assert config.workflows.create_parents is True

    def test_global_alias(self):
        config = WfEditConfig(**{"global": {"output_format": "json"}})
        assert config.global_settings.output_format == OutputFormat.JSON

    def test_invalid_color(self):
        with pytest.raises(ValueError):
            GlobalConfig(color="sometimes")

    def test_patterns_from_comma_string(self):
        settings = WorkflowSettings(file_patterns="*.yml, *.wf")
        assert settings.file_patterns == ["*.yml", "*.wf"]

    def test_empty_patterns_rejected(self):
        with pytest.raises(ValueError):
            WorkflowSettings(file_patterns=[])

    def test_blank_entry_tool_rejected(self):
        with pytest.raises(ValueError):
            WorkflowSettings(entry_tool="  ")


class TestEnvOverrides:
    """Tests for environment variable overrides."""

    def test_empty(self):
        assert EnvOverrides().as_config_dict() == {}

    def test_values(self):
        os.environ["WFEDIT_OUTPUT_FORMAT"] = "yaml"
        os.environ["WFEDIT_ENTRY_TOOL"] = "run_steps"
        assert EnvOverrides().as_config_dict() == {
            "global": {"output_format": "yaml"},
            "workflows": {"entry_tool": "run_steps"},
        }


class TestConfigLoader:
    """Tests for merging configuration sources."""

    def test_no_files(self, project_dir):
        config = ConfigLoader().load()
        assert config.workflows.entry_tool == "execute_sequence"

    def test_project_config(self, project_dir):
        (project_dir / "wfedit.yaml").write_text("workflows:\n  entry_tool: run_steps\n")
        assert ConfigLoader().load().workflows.entry_tool == "run_steps"

    def test_project_config_found_upwards(self, project_dir, monkeypatch):
        (project_dir / ".wfedit.yml").write_text("global:\n  output_format: json\n")
        nested = project_dir / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert ConfigLoader().load().global_settings.output_format == OutputFormat.JSON

    def test_user_config(self, project_dir):
        user_dir = Path(os.environ["HOME"]) / ".wfedit"
        user_dir.mkdir(exist_ok=True)
        (user_dir / "config.yaml").write_text("workflows:\n  create_parents: false\n")
        try:
            assert ConfigLoader().load().workflows.create_parents is False
        finally:
            (user_dir / "config.yaml").unlink()

    def test_explicit_file_overrides_project(self, project_dir, tmp_path):
        (project_dir / "wfedit.yaml").write_text(
            "workflows:\n  entry_tool: run_steps\n  create_parents: false\n"
        )
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("workflows:\n  entry_tool: other_tool\n")
        config = ConfigLoader().load(explicit)
        assert config.workflows.entry_tool == "other_tool"
        assert config.workflows.create_parents is False

    def test_env_overrides_files(self, project_dir):
        (project_dir / "wfedit.yaml").write_text("workflows:\n  entry_tool: run_steps\n")
        os.environ["WFEDIT_ENTRY_TOOL"] = "env_tool"
        assert ConfigLoader().load().workflows.entry_tool == "env_tool"

    def test_missing_explicit_file(self, project_dir, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader().load(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, project_dir):
        (project_dir / "wfedit.yaml").write_text("workflows: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader().load()

    def test_non_mapping(self, project_dir):
        (project_dir / "wfedit.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader().load()

    def test_invalid_values(self, project_dir):
        (project_dir / "wfedit.yaml").write_text("global:\n  color: sometimes\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ConfigLoader().load()
