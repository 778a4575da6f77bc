"""Lazy-loading Click group.

Subcommands are declared as import paths and only imported when invoked, so
`flipscan --help` lists them from their declared short help without
importing the command modules.
"""

from __future__ import annotations

import importlib
from typing import Any, NamedTuple

import click


class LazyCommand(NamedTuple):
    """Where a subcommand lives and how it is summarized in --help."""

    module: str
    attr: str
    short_help: str


class LazyGroup(click.Group):
    """A Click group that imports subcommands on first use.

    Commands are listed in declaration order.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, LazyCommand] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._lazy_subcommands: dict[str, LazyCommand] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        eager = [name for name in super().list_commands(ctx) if name not in self._lazy_subcommands]
        return list(self._lazy_subcommands) + eager

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        lazy = self._lazy_subcommands.get(cmd_name)
        if lazy is None:
            return super().get_command(ctx, cmd_name)

        if cmd_name not in self.commands:
            self.add_command(self._load(cmd_name, lazy), cmd_name)
        return self.commands[cmd_name]

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        rows = []
        for name in self.list_commands(ctx):
            lazy = self._lazy_subcommands.get(name)
            if lazy is not None:
                rows.append((name, lazy.short_help))
                continue
            cmd = super().get_command(ctx, name)
            if cmd is not None and not cmd.hidden:
                rows.append((name, cmd.get_short_help_str()))

        if rows:
            with formatter.section("Commands"):
                formatter.write_dl(rows)

    @staticmethod
    def _load(cmd_name: str, lazy: LazyCommand) -> click.Command:
        try:
            module = importlib.import_module(lazy.module)
            cmd = getattr(module, lazy.attr)
        except (ImportError, AttributeError) as e:
            raise click.ClickException(f"Failed to load command '{cmd_name}': {e}") from None

        if not isinstance(cmd, click.Command):
            raise click.ClickException(
                f"Failed to load command '{cmd_name}': {lazy.module}.{lazy.attr} is not a command"
            )
        return cmd


__all__ = ["LazyCommand", "LazyGroup"]
