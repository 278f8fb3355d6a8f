"""Workflow commands - read, list, search, edit, append, create, validate."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click
from rich.markup import escape

from wfedit.core.context import WfEditContext, pass_context
from wfedit.core.exceptions import EncodingError, FileAccessError, WfEditError
from wfedit.core.output import OutputFormat, format_bytes
from wfedit.documents.editor import EditRequest
from wfedit.workflows.builder import WorkflowBuilder


@contextmanager
def reporting(ctx: WfEditContext) -> Iterator[None]:
    """Turn wfedit errors into a printed error and exit code 1."""
    try:
        yield
    except WfEditError as e:
        ctx.fail(e)


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--start", "start_line", type=click.IntRange(min=1), default=1, help="First line to show")
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Maximum number of lines")
@pass_context
def read(ctx: WfEditContext, file: str, start_line: int, limit: int | None) -> None:
    """Show a workflow file with line numbers."""
    with reporting(ctx):
        lines = ctx.repository.read(file, start_line, limit)

    if ctx.output.format == OutputFormat.TABLE:
        if not lines:
            ctx.output.print_info("No lines in range")
            return
        ctx.output.print_code("\n".join(text for _, text in lines), start_line=lines[0][0])
    elif ctx.output.format == OutputFormat.RAW:
        ctx.output.print_data([f"{n:>6}\t{text}" for n, text in lines])
    else:
        ctx.output.print_data([{"line": n, "text": text} for n, text in lines])


@click.command("list")
@click.argument("directory", default=".", type=click.Path())
@click.option("--pattern", "-p", multiple=True, help="File glob (repeatable, default: *.yml, *.yaml)")
@pass_context
def list_workflows(ctx: WfEditContext, directory: str, pattern: tuple[str, ...]) -> None:
    """List workflow files and their validation status.

    \b
    Examples:
        wfedit list ./workflows
        wfedit list . -p "*.workflow.yml"
    """
    with reporting(ctx):
        listings = ctx.repository.list_workflows(directory, list(pattern) or None)

    if ctx.output.structured:
        ctx.output.print_data([listing.to_dict() for listing in listings])
        return

    if not listings:
        ctx.output.print_info(f"No workflow files found in {directory}")
        return

    data = [
        {
            "Path": _display_path(listing.path),
            "Size": format_bytes(listing.size),
            "Status": listing.status,
            "Steps": listing.steps if listing.steps is not None else "-",
            "Error": (listing.error or "")[:60],
        }
        for listing in listings
    ]
    valid = sum(1 for listing in listings if listing.valid)
    ctx.output.print_data(
        data,
        headers=["Path", "Size", "Status", "Steps", "Error"],
        title=f"Workflows ({valid}/{len(listings)} valid)",
    )


@click.command()
@click.argument("directory", type=click.Path())
@click.argument("pattern")
@click.option("--regex", "-r", "use_regex", is_flag=True, help="Treat PATTERN as a regular expression")
@click.option("--filter", "-f", "file_filter", multiple=True, help="File glob (repeatable)")
@click.option("--limit", "-n", type=click.IntRange(min=1), help="Stop after this many matches")
@pass_context
def search(
    ctx: WfEditContext,
    directory: str,
    pattern: str,
    use_regex: bool,
    file_filter: tuple[str, ...],
    limit: int | None,
) -> None:
    """Search workflow files for PATTERN, line by line.

    \b
    Examples:
        wfedit search ./workflows navigate_browser
        wfedit search . "url: https?://" --regex
    """
    with reporting(ctx):
        results = ctx.repository.search(
            directory,
            pattern,
            use_regex=use_regex,
            file_filter=list(file_filter) or None,
            max_results=limit,
        )

        if ctx.output.structured:
            matches = [match.to_dict() for match in results]
            ctx.output.print_data(
                {
                    "matches": matches,
                    "warnings": [w.to_dict() for w in results.warnings],
                }
            )
            return

        count = 0
        for match in results:
            count += 1
            location = f"{_display_path(match.path)}:{match.span.line}:{match.span.start + 1}"
            ctx.output.print(f"[cyan]{escape(location)}[/cyan]: {escape(match.line_text)}")

    for warning in results.warnings:
        ctx.output.print_warning(f"Skipped {warning.path}: {warning.message}")
    if count == 0:
        ctx.output.print_info("No matches found")


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--old", "old_text", required=True, help="Exact text to replace")
@click.option("--new", "new_text", required=True, help="Replacement text")
@click.option("--all", "replace_all", is_flag=True, help="Replace every occurrence")
@pass_context
def edit(ctx: WfEditContext, file: str, old_text: str, new_text: str, replace_all: bool) -> None:
    """Replace an exact text occurrence in FILE.

    The text must occur exactly once unless --all is given. Workflow files
    are validated after the edit and left untouched if the result is invalid.
    """
    with reporting(ctx):
        request = EditRequest.of(old_text, new_text, replace_all)
        result = ctx.repository.edit(file, request)

    if ctx.output.structured:
        ctx.output.print_data(
            {"file_path": str(result.document.path), "replacements": result.replacements}
        )
        return
    ctx.output.print_success(
        f"Replaced {result.replacements} occurrence(s) in {_display_path(result.document.path)}"
    )


def _read_content(content: str | None, from_file: str | None) -> str:
    """Content from --content, --from-file or stdin, newlines untranslated.

    Raises:
        EncodingError: --from-file is not valid UTF-8
        FileAccessError: --from-file cannot be read
    """
    if content is not None:
        return content
    if from_file is not None:
        try:
            with open(from_file, encoding="utf-8", newline="") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"File is not valid UTF-8 text: {from_file}",
                path=from_file,
                details={"position": e.start},
            )
        except OSError as e:
            raise FileAccessError(f"Cannot read {from_file}: {e}", path=from_file)
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        raise click.UsageError("Provide --content, --from-file, or pipe content on stdin")
    return stdin.read()


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--content", help="Workflow YAML content")
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read workflow content from this file",
)
@pass_context
def create(ctx: WfEditContext, file: str, content: str | None, from_file: str | None) -> None:
    """Create a new workflow FILE after validating its content.

    \b
    Examples:
        wfedit create ./flows/login.yml --from-file draft.yml
        cat draft.yml | wfedit create ./flows/login.yml
    """
    with reporting(ctx):
        text = _read_content(content, from_file)
        validation = ctx.repository.create(file, text)

    if ctx.output.structured:
        ctx.output.print_data({"file_path": file, "validation": validation.to_dict()})
        return
    ctx.output.print_success(f"Created workflow: {file}")


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--content", help="Workflow YAML content")
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Read workflow content from this file",
)
@pass_context
def append(ctx: WfEditContext, file: str, content: str | None, from_file: str | None) -> None:
    """Append content to the end of an existing FILE.

    Workflow files are validated with the content added and left untouched
    if the result is invalid.

    \b
    Examples:
        wfedit append ./flows/login.yml --from-file more_steps.yml
        cat more_steps.yml | wfedit append ./flows/login.yml
    """
    with reporting(ctx):
        text = _read_content(content, from_file)
        document = ctx.repository.append(file, text)

    if ctx.output.structured:
        ctx.output.print_data({"file_path": str(document.path), "lines": document.line_count})
        return
    ctx.output.print_success(f"Appended to {_display_path(document.path)}")


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@pass_context
def validate(ctx: WfEditContext, file: str) -> None:
    """Validate a workflow YAML file."""
    with reporting(ctx):
        result, workflow = ctx.repository.inspect(file)

    if ctx.output.structured:
        ctx.output.print_data({"file_path": file, **result.to_dict()})
        if not result.ok:
            raise SystemExit(1)
        return

    if workflow is None:
        ctx.output.print_error(f"Workflow is invalid: {file}")
        ctx.output.print_data(
            [{"Path": v.path, "Problem": v.message} for v in result.violations],
            headers=["Path", "Problem"],
            title=f"Violations ({len(result.violations)})",
        )
        raise SystemExit(1)

    ctx.output.print_success(f"Workflow is valid: {file}")
    extra = workflow.model_extra or {}
    ctx.output.print_data(
        {
            "Name": extra.get("name") or "(unnamed)",
            "Steps": len(workflow.steps),
            "Total steps": sum(1 for _ in workflow.iter_steps()),
            "Tools": ", ".join(workflow.tools) or "-",
        },
        title="Workflow Summary",
    )


@click.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--name", help="Workflow name")
@click.option("--description", "-d", help="Workflow description")
@click.option("--step", "steps", multiple=True, metavar="TOOL", help="Add an empty step (repeatable)")
@pass_context
def new(
    ctx: WfEditContext,
    file: str,
    name: str | None,
    description: str | None,
    steps: tuple[str, ...],
) -> None:
    """Create a workflow skeleton at FILE.

    \b
    Examples:
        wfedit new ./flows/notepad.yml --name notepad --step open_application
    """
    with reporting(ctx):
        builder = WorkflowBuilder(name=name, entry_tool=ctx.config.workflows.entry_tool)
        if description:
            builder.description(description)
        for tool_name in steps:
            builder.step(tool_name)
        ctx.repository.create(file, builder.to_yaml())

    ctx.output.print_success(f"Created workflow: {file}")
    ctx.output.print_info(f"Edit it with: wfedit edit {file} --old ... --new ...")


def register(group: click.Group) -> None:
    """Attach the workflow commands to ``group``."""
    for command in (read, list_workflows, search, edit, append, create, validate, new):
        group.add_command(command)
