"""Mimir CLI entrypoint."""

from __future__ import annotations

import logging

import click

from mimir import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mimir")
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Mimir — run sandboxed coding agents."""
    if verbose:
        from rich.logging import RichHandler

        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        )


# Register subcommands
from mimir.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
