"""Configuration management for wfedit using Pydantic."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from wfedit.core.exceptions import ConfigError
from wfedit.core.logging import LogLevel
from wfedit.core.output import OutputFormat

DEFAULT_ENTRY_TOOL = "execute_sequence"
DEFAULT_FILE_PATTERNS = ["*.yml", "*.yaml"]


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.WARNING

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class WorkflowSettings(BaseModel):
    """How workflow files are recognized and validated."""

    entry_tool: str = DEFAULT_ENTRY_TOOL
    file_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_FILE_PATTERNS))
    create_parents: bool = True

    @field_validator("entry_tool")
    @classmethod
    def validate_entry_tool(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("entry_tool must not be empty")
        return v

    @field_validator("file_patterns", mode="before")
    @classmethod
    def split_patterns(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("file_patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("file_patterns must contain at least one glob")
        return v


class WfEditConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    workflows: WorkflowSettings = Field(default_factory=WorkflowSettings)


class EnvOverrides(BaseSettings):
    """``WFEDIT_*`` environment variables; these win over config files."""

    model_config = SettingsConfigDict(env_prefix="WFEDIT_", extra="ignore")

    output_format: OutputFormat | None = None
    verbosity: LogLevel | None = None
    entry_tool: str | None = None

    def as_config_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.output_format is not None:
            result.setdefault("global", {})["output_format"] = self.output_format.value
        if self.verbosity is not None:
            result.setdefault("global", {})["verbosity"] = self.verbosity.value
        if self.entry_tool:
            result.setdefault("workflows", {})["entry_tool"] = self.entry_tool
        return result


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; nested mappings merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Builds a :class:`WfEditConfig` from layered sources.

    Later sources win:

    1. User config (``~/.wfedit/config.yaml``)
    2. Project config (nearest ``wfedit.yaml`` from the working directory up)
    3. Explicit ``--config`` file
    4. ``WFEDIT_*`` environment variables
    """

    CONFIG_FILENAMES = ("wfedit.yaml", "wfedit.yml", ".wfedit.yaml", ".wfedit.yml")

    def config_files(self, config_file: str | Path | None = None) -> list[Path]:
        """Config files that apply, lowest priority first."""
        files = []
        user_config = Path.home() / ".wfedit" / "config.yaml"
        if user_config.is_file():
            files.append(user_config)

        project_config = self.find_project_config()
        if project_config is not None:
            files.append(project_config)

        if config_file:
            explicit = Path(config_file).expanduser()
            if not explicit.is_file():
                raise ConfigError(f"Config file not found: {config_file}")
            files.append(explicit)
        return files

    def find_project_config(self, start: Path | None = None) -> Path | None:
        directory = (start or Path.cwd()).absolute()
        for candidate_dir in (directory, *directory.parents):
            for filename in self.CONFIG_FILENAMES:
                candidate = candidate_dir / filename
                if candidate.is_file():
                    return candidate
        return None

    def read_file(self, path: Path) -> dict[str, Any]:
        """Parse one YAML config file; an empty file is an empty mapping."""
        try:
            content = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {path}: {e}")
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return content

    def load(self, config_file: str | Path | None = None) -> WfEditConfig:
        """Load and validate the merged configuration.

        Raises:
            ConfigError: a file is missing, unreadable, not a mapping, or the
                merged values fail validation
        """
        merged: dict[str, Any] = {}
        for path in self.config_files(config_file):
            merged = deep_merge(merged, self.read_file(path))

        try:
            merged = deep_merge(merged, EnvOverrides().as_config_dict())
            return WfEditConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}")


_config_loader = ConfigLoader()


def load_config(config_file: str | Path | None = None) -> WfEditConfig:
    """Load wfedit configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file)


def get_default_config() -> WfEditConfig:
    """Get default configuration without loading from files."""
    return WfEditConfig()
