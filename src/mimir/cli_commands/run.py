"""``mimir run`` — execute a task with an agent."""

from __future__ import annotations

import asyncio
import sys

import click

from mimir.cli_commands._output import console, print_event, print_result


@click.command()
@click.argument("task")
@click.option(
    "--project", "-p", default=".", type=click.Path(file_okay=False), help="Project directory."
)
@click.option(
    "--config", "-c", "config_path", default=None, type=click.Path(exists=True), help="Config file."
)
@click.option("--role", "-r", default=None, help="Agent role (see `mimir roles`).")
@click.option("--model", "-m", default=None, help="LiteLLM model name, e.g. openai/gpt-4o.")
@click.option(
    "--mode", type=click.Choice(["native", "devcontainer"]), default=None, help="Execution mode."
)
@click.option("--max-iterations", type=click.IntRange(min=1), default=None, help="Iteration cap.")
@click.option("--yes", "-y", is_flag=True, help="Approve risky operations without prompting.")
@click.option("--stream/--no-stream", default=True, help="Print steps as they happen.")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--telemetry", is_flag=True, help="Print OpenTelemetry spans to the console.")
def run(
    task: str,
    project: str,
    config_path: str | None,
    role: str | None,
    model: str | None,
    mode: str | None,
    max_iterations: int | None,
    yes: bool,
    stream: bool,
    as_json: bool,
    telemetry: bool,
) -> None:
    """Run TASK with an agent in the project sandbox."""
    from mimir.config import load_config
    from mimir.errors import MimirError
    from mimir.runner import AgentRunner
    from mimir.runtime.execution.models import ExecutionMode
    from mimir.runtime.permissions import AutoApprover, CLIApprover

    try:
        config = load_config(project, config_path)
    except MimirError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(1)

    if model:
        config.model.model = model
    if mode:
        config.execution.mode = ExecutionMode(mode)
        config.execution.devcontainer.auto_detect = False
    if max_iterations is not None:
        config.budget.max_iterations = max_iterations

    if telemetry:
        from mimir.utils.telemetry import configure_telemetry

        try:
            configure_telemetry()
        except ImportError as exc:
            console.print(f"[yellow]Telemetry disabled:[/yellow] {exc}")

    approver = AutoApprover() if yes else CLIApprover()
    runner = AgentRunner(config, approver=approver)
    on_stream = print_event if stream and not as_json else None

    try:
        result = asyncio.run(runner.run(task, role=role, on_stream=on_stream))
    except MimirError as exc:
        console.print(f"[red]Execution error:[/red] {exc}")
        sys.exit(1)

    print_result(result, as_json=as_json)
    if not result.success:
        sys.exit(1)
