"""``mimir tools`` — list the built-in tools."""

from __future__ import annotations

import json

import click

from mimir.cli_commands._output import console, print_tools_table


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the OpenAI function schemas.")
def tools(as_json: bool) -> None:
    """List the tools an agent can be given."""
    from mimir.tools.builtin import builtin_tools
    from mimir.tools.registry import ToolRegistry

    registry = ToolRegistry()
    for tool in builtin_tools():
        registry.register(tool)

    if as_json:
        console.print_json(json.dumps(registry.get_schemas()))
        return

    print_tools_table(registry.list())
    console.print(f"Total schema cost: ~{registry.total_token_cost()} tokens")
