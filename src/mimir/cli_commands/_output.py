"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from mimir.core.agent.models import AgentResult, StreamEvent, StreamEventType  # noqa: TC001
from mimir.core.agent.roles import RoleConfig  # noqa: TC001
from mimir.tools.base import BaseTool  # noqa: TC001

console = Console()

_STATUS_STYLE = {"completed": "green", "failed": "red", "interrupted": "yellow"}


def print_result(result: AgentResult, *, as_json: bool = False) -> None:
    """Pretty-print an agent run."""
    if as_json:
        console.print_json(result.model_dump_json())
        return

    style = _STATUS_STYLE.get(result.status.value, "white")
    console.print(f"\n[bold]Status:[/bold] [{style}]{result.status.value}[/{style}]")
    console.print(f"  Steps: {len(result.steps)}")
    console.print(f"  Tokens: {result.total_tokens}")
    console.print(f"  Cost: ${result.total_cost:.4f}")
    console.print(f"  Duration: {result.duration_ms / 1000:.1f}s")

    if result.steps:
        table = Table(title="Steps")
        table.add_column("#", justify="right")
        table.add_column("Action", style="cyan")
        table.add_column("Outcome")
        for step in result.steps:
            action = step.action.tool or step.action.type.value
            obs = step.observation
            outcome = "-" if obs is None else ("ok" if obs.success else f"error: {obs.error}")
            table.add_row(str(step.step_number), action, _truncate(outcome))
        console.print(table)

    if result.final_response:
        console.print(f"\n[bold]Response:[/bold]\n{result.final_response}")
    if result.error:
        console.print(f"\n[red]Error:[/red] {result.error}")


def print_event(event: StreamEvent) -> None:
    """Render one stream event as a single line."""
    data = event.data
    if event.type is StreamEventType.STEP_START:
        console.print(f"[dim]── step {data.get('step_number')}[/dim]")
    elif event.type is StreamEventType.THOUGHT:
        console.print(f"[italic]{_truncate(str(data.get('thought', '')), 200)}[/italic]")
    elif event.type is StreamEventType.ACTION:
        action: dict[str, Any] = data.get("action", {})
        if action.get("tool"):
            args = json.dumps(action.get("input", {}), default=str)
            console.print(f"[cyan]→ {action['tool']}[/cyan] {_truncate(args)}")
    elif event.type is StreamEventType.OBSERVATION:
        obs: dict[str, Any] = data.get("observation", {})
        if not obs.get("success", True):
            console.print(f"[red]✗ {_truncate(str(obs.get('error')))}[/red]")
    elif event.type is StreamEventType.ERROR:
        console.print(f"[red]{data.get('error')}[/red]")


def print_tools_table(tools: list[BaseTool]) -> None:
    """Pretty-print registered tools as a table."""
    table = Table(title="Built-in Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Tokens", justify="right")
    table.add_column("Description")

    for tool in tools:
        table.add_row(tool.name, str(tool.token_cost), _truncate(tool.description))

    console.print(table)


def print_roles_table(roles: list[RoleConfig]) -> None:
    """Pretty-print agent roles as a table."""
    table = Table(title="Agent Roles")
    table.add_column("Role", style="cyan")
    table.add_column("Access")
    table.add_column("Iterations", justify="right")
    table.add_column("Description")

    for role in roles:
        access = role.tool_access_level.value if role.tool_access_level else "-"
        iterations = role.default_budget.max_iterations
        table.add_row(
            role.role,
            access,
            str(iterations) if iterations is not None else "-",
            _truncate(role.description),
        )

    console.print(table)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
