"""Command-line entry point for wfedit."""

import sys

import click
from rich.console import Console
from rich.markup import escape

from wfedit import __version__
from wfedit.commands import workflow
from wfedit.config import load_config
from wfedit.core.context import WfEditContext, pass_context
from wfedit.core.exceptions import ConfigError, WfEditError
from wfedit.core.output import OutputFormat
from wfedit.core.suggestions import SuggestingGroup


_stderr = Console(stderr=True)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


def _to_output_format(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> OutputFormat | None:
    return OutputFormat(value.lower()) if value else None


@click.group(cls=SuggestingGroup, context_settings=CONTEXT_SETTINGS)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat], case_sensitive=False),
    callback=_to_output_format,
    help="Output format (default from config: table)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vvv for debug)",
)
@click.option("-q", "--quiet", is_flag=True, help="Only print data and errors")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    metavar="FILE",
    envvar="WFEDIT_CONFIG",
    help="Path to config file",
)
@click.version_option(__version__, "--version", prog_name="wfedit", message="%(prog)s version %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """wfedit - read, search, edit and validate automation workflow files.

    Edits are exact-match: the text to replace must occur exactly once
    unless --all is given, and workflow files are validated before they
    are written.

    \b
    Examples:
        wfedit list ./workflows
        wfedit search ./workflows navigate_browser
        wfedit edit flow.yml --old "notepad" --new "calc" --all
        wfedit validate flow.yml

    \b
    Configuration:
        ~/.wfedit/config.yaml    User configuration
        ./wfedit.yaml            Project configuration
        WFEDIT_*                 Environment variables
    """
    try:
        config = load_config(config_file)
    except ConfigError as e:
        _stderr.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        ctx.exit(1)

    ctx.obj = WfEditContext(
        config=config,
        output_format=output_format,
        verbose=verbose,
        quiet=quiet,
        color=False if no_color else None,
    )


workflow.register(cli)


@cli.command()
@pass_context
def config(ctx: WfEditContext) -> None:
    """Show the effective configuration after all sources are merged."""
    settings = ctx.config.workflows
    ctx.output.print_data(
        {
            "output_format": ctx.output_format.value,
            "verbosity": ctx.config.global_settings.verbosity.value,
            "color": ctx.color,
            "entry_tool": settings.entry_tool,
            "file_patterns": ", ".join(settings.file_patterns),
            "create_parents": settings.create_parents,
        },
        title="Effective Configuration",
    )


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except WfEditError as e:
        _stderr.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)
    except KeyboardInterrupt:
        _stderr.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
