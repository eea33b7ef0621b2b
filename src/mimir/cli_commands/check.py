"""``mimir check`` — report how a project would be executed."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.table import Table

from mimir.cli_commands._output import console


@click.command()
@click.option(
    "--project",
    "-p",
    default=".",
    type=click.Path(exists=True, file_okay=False),
    help="Project directory.",
)
@click.option(
    "--config", "-c", "config_path", default=None, type=click.Path(exists=True), help="Config file."
)
def check(project: str, config_path: str | None) -> None:
    """Show the resolved config, execution mode and docker availability."""
    from mimir.config import find_config, load_config
    from mimir.errors import MimirError
    from mimir.runtime.execution.devcontainer import find_descriptor
    from mimir.runtime.execution.docker_client import DockerClient
    from mimir.runtime.execution.factory import detect_mode

    try:
        config = load_config(project, config_path)
    except MimirError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    execution = config.execution
    source = config_path or find_config(project)
    descriptor = find_descriptor(execution.project_dir, execution.devcontainer.config_path)
    mode = execution.mode
    if mode.value == "native" and execution.devcontainer.auto_detect:
        mode = detect_mode(execution.project_dir, execution.devcontainer.config_path)

    table = Table(title="Mimir Environment", show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Project", execution.project_dir)
    table.add_row("Config", str(source) if source else "(defaults)")
    table.add_row("Model", config.model.model)
    table.add_row("Mode", mode.value)
    table.add_row("Dev container", str(descriptor) if descriptor else "(none)")
    table.add_row("Read access", execution.filesystem.read_access)
    table.add_row("Accept risk", config.permissions.accept_risk_level.value)

    if descriptor is not None:
        version = asyncio.run(DockerClient().server_version())
        table.add_row("Docker", version or "[red]unavailable[/red]")

    console.print(table)
