"""Click context object for sharing state across commands."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

import click

from wfedit.config import WfEditConfig, get_default_config
from wfedit.core.exceptions import WfEditError
from wfedit.core.logging import LogLevel, StructuredLogger, setup_logging
from wfedit.core.output import OutputFormat, OutputFormatter

if TYPE_CHECKING:
    from wfedit.workflows.repository import WorkflowRepository


class WfEditContext:
    """Shared context object for wfedit commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, the workflow repository, and output.
    """

    def __init__(
        self,
        config: WfEditConfig | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        color: bool | None = None,
    ):
        self._config = config or get_default_config()
        settings = self._config.global_settings

        self._output_format = output_format or settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        if color is None:
            color = settings.color == "always" or (
                settings.color == "auto" and sys.stdout.isatty()
            )
        self._color = color

        setup_logging(
            LogLevel.from_flags(verbose, quiet, settings.verbosity),
            rich_output=color,
        )
        self._logger = StructuredLogger(__name__)

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        self._repository: WorkflowRepository | None = None

    @property
    def config(self) -> WfEditConfig:
        return self._config

    @property
    def output(self) -> OutputFormatter:
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        return self._output_format

    @property
    def verbose(self) -> int:
        return self._verbose

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def color(self) -> bool:
        return self._color

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    @property
    def repository(self) -> "WorkflowRepository":
        """Get or create the workflow repository."""
        if self._repository is None:
            from wfedit.workflows.repository import WorkflowRepository

            self._repository = WorkflowRepository(self._config.workflows)
        return self._repository

    def fail(self, error: WfEditError, exit_code: int = 1) -> None:
        """Report ``error`` and exit.

        Structured output formats get the full error payload on stderr.
        """
        self._logger.debug("Command failed", kind=error.kind)
        if self._output.structured:
            self._output.print_error_payload(error.to_dict())
        else:
            self._output.print_error(str(error))
        raise SystemExit(exit_code)


# Click decorator for passing context
pass_context = click.make_pass_decorator(WfEditContext, ensure=True)
