"""Tests for 'did you mean?' command suggestions."""

from click.testing import CliRunner

from wfedit.cli import cli
from wfedit.core.suggestions import format_suggestions, suggest_commands


COMMANDS = ["read", "list", "search", "edit", "create", "validate", "new", "config"]


class TestSuggestCommands:
    """Tests for suggest_commands function."""

    def test_close_typo(self):
        assert suggest_commands("serch", COMMANDS)[0] == "search"

    def test_prefix_first(self):
        assert suggest_commands("val", COMMANDS) == ["validate"]

    def test_no_match(self):
        assert suggest_commands("xyzzy", COMMANDS) == []

    def test_limit(self):
        assert len(suggest_commands("e", COMMANDS, n=1, cutoff=0.0)) == 1


class TestFormatSuggestions:
    """Tests for format_suggestions function."""

    def test_empty(self):
        assert format_suggestions([]) == ""

    def test_single(self):
        assert format_suggestions(["search"]) == "Did you mean 'search'?"

    def test_multiple(self):
        assert format_suggestions(["edit", "new"]) == "Did you mean one of 'edit', 'new'?"


class TestSuggestingGroup:
    """Tests for the CLI group integration."""

    def test_typo_suggests(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["valdate"])
        assert result.exit_code == 2
        assert "Did you mean 'validate'?" in result.output

    def test_unknown_without_suggestion(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["xyzzy"])
        assert result.exit_code == 2
        assert "No such command" in result.output
        assert "Did you mean" not in result.output
