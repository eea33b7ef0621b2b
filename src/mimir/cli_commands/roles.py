"""``mimir roles`` — list the available agent roles."""

from __future__ import annotations

import sys

import click

from mimir.cli_commands._output import console, print_roles_table


@click.command()
@click.argument("name", required=False)
def roles(name: str | None) -> None:
    """List agent roles, or show the prompt and budget of role NAME."""
    from mimir.core.agent.roles import RoleRegistry

    registry = RoleRegistry.with_standard_roles()

    if name is None:
        print_roles_table(registry.list())
        return

    role = registry.get(name)
    if role is None:
        console.print(f"[red]Unknown role:[/red] {name}")
        sys.exit(1)

    console.print(f"[bold]{role.role}[/bold] — {role.description}")
    console.print(f"  Budget: {role.default_budget.model_dump(exclude_none=True)}")
    if role.allowed_tools is not None:
        console.print(f"  Tools: {', '.join(role.allowed_tools)}")
    if role.forbidden_tools:
        console.print(f"  Forbidden: {', '.join(role.forbidden_tools)}")
    if role.system_prompt:
        console.print(f"\n{role.system_prompt}")
