"""Rendering command results as tables, JSON, YAML or plain lines."""

import json
from enum import Enum
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """Supported output formats."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"
    RAW = "raw"


# prefix markup per message kind; warnings and errors go to stderr
_MESSAGE_PREFIXES = {
    "success": "[green]✓[/green]",
    "info": "[blue]ℹ[/blue]",
    "warning": "[yellow]Warning:[/yellow]",
    "error": "[red]Error:[/red]",
}


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, default=str)


def to_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)


class OutputFormatter:
    """Writes command output in the format chosen with ``-o``.

    Data goes to stdout; errors and warnings go to stderr so structured
    output stays parseable. ``quiet`` silences everything except data and
    errors.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.TABLE,
        color: bool = True,
        quiet: bool = False,
    ):
        self.format = format
        self.color = color
        self.quiet = quiet
        console_options = {"force_terminal": color, "no_color": not color, "highlight": color}
        self._console = Console(**console_options)
        self._error_console = Console(stderr=True, **console_options)

    @property
    def structured(self) -> bool:
        """True when output is machine-readable (json/yaml)."""
        return self.format in (OutputFormat.JSON, OutputFormat.YAML)

    def _message(self, kind: str, message: str) -> None:
        if self.quiet and kind != "error":
            return
        target = self._error_console if kind in ("warning", "error") else self._console
        target.print(f"{_MESSAGE_PREFIXES[kind]} {escape(message)}")

    def print(self, message: str, style: str | None = None) -> None:
        """Print rich markup to stdout; callers escape untrusted text."""
        if not self.quiet:
            self._console.print(message, style=style)

    def print_success(self, message: str) -> None:
        self._message("success", message)

    def print_info(self, message: str) -> None:
        self._message("info", message)

    def print_warning(self, message: str) -> None:
        self._message("warning", message)

    def print_error(self, message: str) -> None:
        self._message("error", message)

    def print_error_payload(self, payload: dict[str, Any]) -> None:
        """Write an error's ``to_dict()`` to stderr as JSON or YAML."""
        text = to_yaml(payload) if self.format == OutputFormat.YAML else to_json(payload)
        self._error_console.print(text, markup=False, highlight=False, soft_wrap=True)

    def print_data(
        self,
        data: list[dict[str, Any]] | dict[str, Any] | list[Any],
        headers: list[str] | None = None,
        title: str | None = None,
    ) -> None:
        """Print data in the configured format."""
        if self.format == OutputFormat.JSON:
            self._print_serialized(to_json(data), "json")
        elif self.format == OutputFormat.YAML:
            self._print_serialized(to_yaml(data), "yaml")
        elif self.format == OutputFormat.RAW:
            self._print_raw(data)
        elif isinstance(data, dict):
            self._console.print(self._record_table(data, title))
        elif data:
            self._console.print(self._rows_table(data, headers, title))
        else:
            self._console.print("[dim]No data to display[/dim]")

    def _print_serialized(self, text: str, lexer: str) -> None:
        if self.color:
            self._console.print(Syntax(text.rstrip("\n"), lexer, theme="monokai"))
        else:
            # plain print keeps long values unwrapped
            print(text.rstrip("\n"))

    def _print_raw(self, data: Any) -> None:
        if isinstance(data, dict):
            lines = [f"{key}: {value}" for key, value in data.items()]
        elif isinstance(data, list):
            lines = [str(item) for item in data]
        else:
            lines = [str(data)]
        for line in lines:
            print(line)

    @staticmethod
    def _record_table(record: dict[str, Any], title: str | None) -> Table:
        table = Table(title=title, header_style="bold cyan")
        table.add_column("Field", style="dim")
        table.add_column("Value")
        for key, value in record.items():
            table.add_row(str(key), escape(str(value)))
        return table

    @staticmethod
    def _rows_table(rows: list[Any], headers: list[str] | None, title: str | None) -> Table:
        headers = headers or list(rows[0].keys())
        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(str(row.get(h, ""))) for h in headers))
        return table

    def print_code(self, code: str, language: str = "yaml", start_line: int = 1) -> None:
        """Print file content with line numbers starting at ``start_line``."""
        self._console.print(
            Syntax(code, language, theme="monokai", line_numbers=True, start_line=start_line)
        )


def format_bytes(size: float) -> str:
    """Format bytes to human-readable string."""
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if abs(size) < 1024.0:
            return f"{size:3.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"
