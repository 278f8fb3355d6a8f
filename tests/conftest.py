"""Pytest fixtures for wfedit tests."""

import os
from pathlib import Path
from typing import Callable, Generator

import pytest
from click.testing import CliRunner

from wfedit.config import GlobalConfig, WfEditConfig, WorkflowSettings
from wfedit.core.context import WfEditContext
from wfedit.core.output import OutputFormat
from wfedit.workflows.repository import WorkflowRepository


VALID_WORKFLOW = """\
tool_name: execute_sequence
arguments:
  steps:
    - tool_name: navigate_browser
      arguments:
        url: https://example.com
    - tool_name: open_application
      arguments:
        app_name: notepad
"""

EMPTY_WORKFLOW = "tool_name: execute_sequence\narguments:\n  steps: []"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI runner."""
    return CliRunner()


@pytest.fixture
def mock_config() -> WfEditConfig:
    """Create a mock configuration."""
    return WfEditConfig(
        global_settings=GlobalConfig(output_format=OutputFormat.TABLE, color="never"),
        workflows=WorkflowSettings(),
    )


@pytest.fixture
def mock_context(mock_config: WfEditConfig) -> WfEditContext:
    """Create a mock wfedit context."""
    return WfEditContext(
        config=mock_config,
        output_format=OutputFormat.TABLE,
        verbose=0,
        quiet=True,
        color=False,
    )


@pytest.fixture
def repository() -> WorkflowRepository:
    return WorkflowRepository()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Write ``content`` to ``tmp_path / name`` byte for byte."""

    def _write(name: str, content: str | bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture(autouse=True)
def clean_env(tmp_path_factory: pytest.TempPathFactory) -> Generator[None, None, None]:
    """Clean environment variables and isolate the user config directory."""
    env_vars = [
        "WFEDIT_OUTPUT_FORMAT",
        "WFEDIT_VERBOSITY",
        "WFEDIT_ENTRY_TOOL",
        "WFEDIT_CONFIG",
        "HOME",
    ]

    original = {k: os.environ.get(k) for k in env_vars}

    for k in env_vars:
        os.environ.pop(k, None)
    os.environ["HOME"] = str(tmp_path_factory.mktemp("home"))

    yield

    for k, v in original.items():
        if v is not None:
            os.environ[k] = v
        else:
            os.environ.pop(k, None)


@pytest.fixture
def valid_workflow() -> str:
    """Two-step workflow content."""
    return VALID_WORKFLOW


@pytest.fixture
def empty_workflow() -> str:
    return EMPTY_WORKFLOW
