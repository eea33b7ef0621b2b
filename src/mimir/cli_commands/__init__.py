"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from mimir.cli_commands.check import check
    from mimir.cli_commands.roles import roles
    from mimir.cli_commands.run import run
    from mimir.cli_commands.tools import tools

    cli.add_command(run)
    cli.add_command(tools)
    cli.add_command(roles)
    cli.add_command(check)
