"""'Did you mean?' hints for mistyped subcommands."""

from difflib import get_close_matches
from typing import Sequence

import click


def suggest_commands(
    typo: str,
    commands: Sequence[str],
    n: int = 3,
    cutoff: float = 0.6,
) -> list[str]:
    """Rank candidate commands for a mistyped name.

    Commands that start with ``typo`` come first (``val`` -> ``validate``),
    followed by fuzzy matches above ``cutoff``.
    """
    prefixed = [c for c in commands if typo and c.startswith(typo)]
    fuzzy = [
        c for c in get_close_matches(typo, commands, n=n, cutoff=cutoff) if c not in prefixed
    ]
    return (sorted(prefixed) + fuzzy)[:n]


def format_suggestions(suggestions: list[str]) -> str:
    if not suggestions:
        return ""
    if len(suggestions) == 1:
        return f"Did you mean '{suggestions[0]}'?"
    quoted = ", ".join(f"'{s}'" for s in suggestions)
    return f"Did you mean one of {quoted}?"


class SuggestingGroup(click.Group):
    """Click group whose unknown-command error lists the nearest commands."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        cmd_name = click.utils.make_str(args[0]) if args else ""
        if not cmd_name or self.get_command(ctx, cmd_name) is not None or cmd_name.startswith("-"):
            return super().resolve_command(ctx, args)

        visible = [
            name
            for name in self.list_commands(ctx)
            if not getattr(self.get_command(ctx, name), "hidden", False)
        ]
        hint = format_suggestions(suggest_commands(cmd_name, visible))
        message = f"No such command '{cmd_name}'."
        ctx.fail(f"{message} {hint}" if hint else message)
